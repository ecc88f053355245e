"""Organization reports for administrators and staff.

Every report has the same shape (``ReportSchema``): the filters it was built
with, a summary, one row per entity and the generation time. ``export_csv``
turns the rows into a CSV document.
"""

import csv
import io
import typing as t
from collections import Counter

import structlog
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from accounts.models import KinshipUser
from events.models import MemberProfile, Registration
from events.schema import DashboardSchema, ReportFilterSchema, ReportSchema, ReportType
from events.service import policy
from events.service.policy import Capability

logger = structlog.get_logger(__name__)

Status = Registration.Status

CSV_COLUMNS: dict[str, list[str]] = {
    "membership": [
        "member_id",
        "first_name",
        "last_name",
        "email",
        "phone",
        "zip_code",
        "role",
        "membership_status",
        "family_members",
        "joined_at",
        "last_login",
    ],
    "registrations": [
        "registration_id",
        "event_title",
        "event_starts_at",
        "registrant_type",
        "registrant_name",
        "email",
        "status",
        "registered_at",
        "checked_in",
        "checked_in_at",
    ],
    "attendance": [
        "event_id",
        "event_title",
        "event_starts_at",
        "capacity",
        "total_registered",
        "total_checked_in",
        "attendance_rate",
    ],
}


def _rate(part: int, whole: int) -> int:
    """Percentage rounded to a whole number; 0 for an empty whole."""
    return round(part * 100 / whole) if whole else 0


def _iso(value: t.Any) -> str | None:
    return value.isoformat() if value else None


def _filters_used(filters: ReportFilterSchema) -> dict[str, t.Any]:
    return filters.model_dump(mode="json", exclude={"format"}, exclude_none=True)


def _registrations(actor: KinshipUser, filters: ReportFilterSchema) -> QuerySet[Registration]:
    qs = Registration.objects.filter(organization_id=actor.organization_id).select_related(
        "event", "member__user", "family_member__member__user"
    )
    if not filters.include_inactive:
        qs = qs.filter(event__is_active=True)
    if filters.event_id:
        qs = qs.filter(event_id=filters.event_id)
    if filters.start_date:
        qs = qs.filter(registered_at__date__gte=filters.start_date)
    if filters.end_date:
        qs = qs.filter(registered_at__date__lte=filters.end_date)
    return qs


def membership_report(actor: KinshipUser, filters: ReportFilterSchema) -> ReportSchema:
    policy.require(actor, Capability.VIEW_REPORTS)
    qs = (
        MemberProfile.objects.filter(organization_id=actor.organization_id)
        .select_related("user")
        .annotate(family_count=Count("family_members", filter=Q(family_members__is_active=True)))
    )
    if not filters.include_inactive:
        qs = qs.exclude(membership_status=MemberProfile.MembershipStatus.INACTIVE)
    if filters.start_date:
        qs = qs.filter(created_at__date__gte=filters.start_date)
    if filters.end_date:
        qs = qs.filter(created_at__date__lte=filters.end_date)
    members = list(qs.order_by("user__last_name", "user__first_name", "user__email"))

    statuses = Counter(str(m.membership_status) for m in members)
    summary = {
        "total_members": len(members),
        "active_members": statuses[MemberProfile.MembershipStatus.ACTIVE.value],
        "inactive_members": statuses[MemberProfile.MembershipStatus.INACTIVE.value],
        "total_family_members": sum(m.family_count for m in members),
        "status_breakdown": {value: statuses[value] for value in MemberProfile.MembershipStatus.values},
        "role_breakdown": dict(Counter(str(m.user.role) for m in members)),
    }
    rows = [
        {
            "member_id": str(m.id),
            "first_name": m.user.first_name,
            "last_name": m.user.last_name,
            "email": m.user.email,
            "phone": m.phone,
            "zip_code": m.zip_code,
            "role": str(m.user.role),
            "membership_status": str(m.membership_status),
            "family_members": m.family_count,
            "joined_at": _iso(m.created_at),
            "last_login": _iso(m.user.last_login),
        }
        for m in members
    ]
    logger.info("report_generated", report_type="membership", rows=len(rows), user_id=str(actor.id))
    return ReportSchema(
        report_type="membership",
        generated_at=timezone.now(),
        filters=_filters_used(filters),
        summary=summary,
        rows=rows,
    )


def registrations_report(actor: KinshipUser, filters: ReportFilterSchema) -> ReportSchema:
    policy.require(actor, Capability.VIEW_REPORTS)
    qs = _registrations(actor, filters)
    if filters.status:
        qs = qs.filter(status=filters.status)
    registrations = list(qs.order_by("-event__starts_at", "registered_at"))

    statuses = Counter(str(r.status) for r in registrations)
    summary = {
        "total_registrations": len(registrations),
        "status_breakdown": {value: statuses[value] for value in Status.values},
        "checked_in": sum(1 for r in registrations if r.checked_in),
        "unique_events": len({r.event_id for r in registrations}),
        "unique_members": len({r.member_id for r in registrations if r.member_id}),
        "unique_family_members": len({r.family_member_id for r in registrations if r.family_member_id}),
    }
    rows = []
    for r in registrations:
        account = r.member.user if r.member_id else r.family_member.member.user  # type: ignore[union-attr]
        rows.append(
            {
                "registration_id": str(r.id),
                "event_title": r.event.title,
                "event_starts_at": _iso(r.event.starts_at),
                "registrant_type": r.registrant.kind.value,
                "registrant_name": r.registrant_name,
                "email": account.email,
                "status": str(r.status),
                "registered_at": _iso(r.registered_at),
                "checked_in": r.checked_in,
                "checked_in_at": _iso(r.checked_in_at),
            }
        )
    logger.info("report_generated", report_type="registrations", rows=len(rows), user_id=str(actor.id))
    return ReportSchema(
        report_type="registrations",
        generated_at=timezone.now(),
        filters=_filters_used(filters),
        summary=summary,
        rows=rows,
    )


def attendance_report(actor: KinshipUser, filters: ReportFilterSchema) -> ReportSchema:
    """Confirmed registrations per event, with check-in rates."""
    policy.require(actor, Capability.VIEW_REPORTS)
    registrations = _registrations(actor, filters).filter(status=Status.CONFIRMED)
    per_event = list(
        registrations.values("event_id", "event__title", "event__starts_at", "event__capacity")
        .annotate(total_registered=Count("id"), total_checked_in=Count("id", filter=Q(checked_in=True)))
        .order_by("-event__starts_at")
    )
    rows = [
        {
            "event_id": str(e["event_id"]),
            "event_title": e["event__title"],
            "event_starts_at": _iso(e["event__starts_at"]),
            "capacity": e["event__capacity"],
            "total_registered": e["total_registered"],
            "total_checked_in": e["total_checked_in"],
            "attendance_rate": _rate(e["total_checked_in"], e["total_registered"]),
        }
        for e in per_event
    ]
    total_registered = sum(r["total_registered"] for r in rows)
    total_checked_in = sum(r["total_checked_in"] for r in rows)
    summary = {
        "total_events": len(rows),
        "total_registrations": total_registered,
        "total_checked_in": total_checked_in,
        "overall_attendance_rate": _rate(total_checked_in, total_registered),
        "average_event_attendance_rate": round(sum(r["attendance_rate"] for r in rows) / len(rows)) if rows else 0,
    }
    logger.info("report_generated", report_type="attendance", rows=len(rows), user_id=str(actor.id))
    return ReportSchema(
        report_type="attendance",
        generated_at=timezone.now(),
        filters=_filters_used(filters),
        summary=summary,
        rows=rows,
    )


REPORTS: dict[str, t.Callable[[KinshipUser, ReportFilterSchema], ReportSchema]] = {
    "membership": membership_report,
    "registrations": registrations_report,
    "attendance": attendance_report,
}


def build_report(actor: KinshipUser, report_type: ReportType, filters: ReportFilterSchema) -> ReportSchema:
    return REPORTS[report_type](actor, filters)


def export_csv(report: ReportSchema) -> str:
    """Serialize the rows of a report as CSV, every cell quoted."""
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer, fieldnames=CSV_COLUMNS[report.report_type], quoting=csv.QUOTE_ALL, extrasaction="ignore"
    )
    writer.writeheader()
    for row in report.rows:
        writer.writerow({key: "" if value is None else value for key, value in row.items()})
    return buffer.getvalue()


def dashboard(actor: KinshipUser) -> DashboardSchema:
    """The summaries of all reports, without rows."""
    filters = ReportFilterSchema()
    return DashboardSchema(
        generated_at=timezone.now(),
        membership=membership_report(actor, filters).summary,
        registrations=registrations_report(actor, filters).summary,
        attendance=attendance_report(actor, filters).summary,
    )
