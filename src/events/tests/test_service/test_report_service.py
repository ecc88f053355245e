import csv
import io
import typing as t
from datetime import date

import pytest
from django.utils import timezone

from accounts.models import KinshipUser
from events.exceptions import PermissionDeniedError
from events.models import Event, FamilyMember, MemberProfile, Registration
from events.schema import ReportFilterSchema
from events.service import report_service

pytestmark = pytest.mark.django_db

Status = Registration.Status


@pytest.fixture
def populated(
    event: Event,
    event_factory: t.Callable[..., Event],
    member_profile: MemberProfile,
    family_member: FamilyMember,
    other_member_profile: MemberProfile,
    member_factory: t.Callable[..., MemberProfile],
    org_admin: KinshipUser,
) -> dict[str, t.Any]:
    member_factory(status=MemberProfile.MembershipStatus.INACTIVE)
    second_event = event_factory(title="Winter Coat Drive", capacity=5)
    checked_in = Registration.objects.create(
        event=event,
        organization=event.organization,
        member=member_profile,
        status=Status.CONFIRMED,
        checked_in=True,
        checked_in_at=timezone.now(),
        checked_in_by=org_admin,
    )
    Registration.objects.create(
        event=event, organization=event.organization, family_member=family_member, status=Status.CONFIRMED
    )
    Registration.objects.create(
        event=event, organization=event.organization, member=other_member_profile, status=Status.WAITLISTED
    )
    Registration.objects.create(
        event=second_event, organization=event.organization, member=other_member_profile, status=Status.CANCELLED
    )
    return {"event": event, "second_event": second_event, "checked_in": checked_in}


class TestMembershipReport:
    def test_summary_and_rows(self, org_admin: KinshipUser, populated: dict[str, t.Any]) -> None:
        report = report_service.membership_report(org_admin, ReportFilterSchema())

        # admin, member, other member; the inactive one is excluded by default
        assert report.summary["total_members"] == 3
        assert report.summary["inactive_members"] == 0
        assert report.summary["total_family_members"] == 1
        assert report.summary["role_breakdown"] == {"org_admin": 1, "member": 2}
        member_row = next(r for r in report.rows if r["email"] == "member@sample.org")
        assert member_row["family_members"] == 1
        assert member_row["membership_status"] == "active"

    def test_include_inactive(self, org_admin: KinshipUser, populated: dict[str, t.Any]) -> None:
        report = report_service.membership_report(org_admin, ReportFilterSchema(include_inactive=True))

        assert report.summary["total_members"] == 4
        assert report.summary["status_breakdown"]["inactive"] == 1
        assert report.filters == {"include_inactive": True}

    def test_member_cannot_view_reports(self, member_user: KinshipUser) -> None:
        with pytest.raises(PermissionDeniedError):
            report_service.membership_report(member_user, ReportFilterSchema())


class TestRegistrationsReport:
    def test_summary(self, event_staff: KinshipUser, populated: dict[str, t.Any]) -> None:
        report = report_service.registrations_report(event_staff, ReportFilterSchema())

        assert report.summary["total_registrations"] == 4
        assert report.summary["status_breakdown"] == {"pending": 0, "confirmed": 2, "waitlisted": 1, "cancelled": 1}
        assert report.summary["checked_in"] == 1
        assert report.summary["unique_events"] == 2
        assert report.summary["unique_members"] == 2
        assert report.summary["unique_family_members"] == 1
        family_row = next(r for r in report.rows if r["registrant_type"] == "family_member")
        assert family_row["registrant_name"] == "Kid Member"
        assert family_row["email"] == "member@sample.org"

    def test_filters(self, event_staff: KinshipUser, populated: dict[str, t.Any]) -> None:
        by_status = report_service.registrations_report(event_staff, ReportFilterSchema(status=Status.WAITLISTED))
        by_event = report_service.registrations_report(
            event_staff, ReportFilterSchema(event_id=populated["second_event"].id)
        )
        future = report_service.registrations_report(event_staff, ReportFilterSchema(start_date=date(2999, 1, 1)))

        assert by_status.summary["total_registrations"] == 1
        assert by_event.summary["total_registrations"] == 1
        assert future.rows == []

    def test_inactive_events_excluded_by_default(self, event_staff: KinshipUser, populated: dict[str, t.Any]) -> None:
        populated["second_event"].is_active = False
        populated["second_event"].save()

        summary = report_service.registrations_report(event_staff, ReportFilterSchema()).summary
        assert summary["total_registrations"] == 3
        assert (
            report_service.registrations_report(event_staff, ReportFilterSchema(include_inactive=True)).summary[
                "total_registrations"
            ]
            == 4
        )


class TestAttendanceReport:
    def test_rates(self, org_admin: KinshipUser, populated: dict[str, t.Any]) -> None:
        report = report_service.attendance_report(org_admin, ReportFilterSchema())

        assert report.summary == {
            "total_events": 1,
            "total_registrations": 2,
            "total_checked_in": 1,
            "overall_attendance_rate": 50,
            "average_event_attendance_rate": 50,
        }
        [row] = report.rows
        assert row["event_title"] == "Community Picnic"
        assert row["capacity"] == 2
        assert row["attendance_rate"] == 50

    def test_empty(self, org_admin: KinshipUser) -> None:
        report = report_service.attendance_report(org_admin, ReportFilterSchema())

        assert report.rows == []
        assert report.summary["overall_attendance_rate"] == 0
        assert report.summary["average_event_attendance_rate"] == 0


class TestExport:
    def test_csv_quotes_every_cell(self, org_admin: KinshipUser, populated: dict[str, t.Any]) -> None:
        report = report_service.registrations_report(org_admin, ReportFilterSchema())

        document = report_service.export_csv(report)

        lines = document.splitlines()
        assert lines[0] == ",".join(f'"{c}"' for c in report_service.CSV_COLUMNS["registrations"])
        rows = list(csv.DictReader(io.StringIO(document)))
        assert len(rows) == 4
        waitlisted = next(r for r in rows if r["status"] == "waitlisted")
        assert waitlisted["checked_in_at"] == ""
        assert waitlisted["checked_in"] == "False"

    def test_csv_escapes_quotes(self, org_admin: KinshipUser, event_factory: t.Callable[..., Event]) -> None:
        event = event_factory(title='The "Big" Picnic, 2026')
        member = MemberProfile.objects.get(user=org_admin)
        Registration.objects.create(
            event=event, organization=event.organization, member=member, status=Status.CONFIRMED
        )

        document = report_service.export_csv(report_service.attendance_report(org_admin, ReportFilterSchema()))

        assert '"The ""Big"" Picnic, 2026"' in document

    def test_dashboard(self, org_admin: KinshipUser, populated: dict[str, t.Any]) -> None:
        dashboard = report_service.dashboard(org_admin)

        assert dashboard.membership["total_members"] == 3
        assert dashboard.registrations["total_registrations"] == 4
        assert dashboard.attendance["total_checked_in"] == 1
