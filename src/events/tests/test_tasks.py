import typing as t

import pytest
from django.core import mail

from accounts.models import KinshipUser
from common.models import EmailLog
from events import tasks
from events.models import MemberProfile, Organization

pytestmark = pytest.mark.django_db

Status = MemberProfile.MembershipStatus


@pytest.fixture
def applicant(member_factory: t.Callable[..., MemberProfile]) -> MemberProfile:
    return member_factory(email="applicant@example.com", status=Status.PENDING_APPROVAL)


def test_invite_mentions_expiry(applicant: MemberProfile, settings: t.Any) -> None:
    tasks.send_member_invite(str(applicant.id), "the-token")

    [message] = mail.outbox
    assert f"expires in {int(settings.INVITE_TOKEN_LIFETIME.total_seconds() // 3600)} hours" in message.body
    assert message.body.rstrip().endswith("you can ignore this email.")
    assert "token=the-token" in message.body
    assert message.reply_to == ["hello@sample.org"]


def test_admin_notice_goes_to_every_active_admin(
    applicant: MemberProfile,
    org_admin: KinshipUser,
    member_factory: t.Callable[..., MemberProfile],
) -> None:
    member_factory(email="second.admin@sample.org", role=KinshipUser.Role.ORG_ADMIN)
    member_factory(email="gone.admin@sample.org", role=KinshipUser.Role.ORG_ADMIN, status=Status.INACTIVE)

    tasks.notify_admins_of_membership_request(str(applicant.id))

    [message] = mail.outbox
    assert sorted(message.bcc) == ["admin@sample.org", "second.admin@sample.org"]
    assert EmailLog.objects.filter(subject=message.subject).count() == 2


def test_admin_notice_without_admins_sends_nothing(applicant: MemberProfile) -> None:
    tasks.notify_admins_of_membership_request(str(applicant.id))

    assert mail.outbox == []


def test_denial_points_to_contact_email(applicant: MemberProfile, organization: Organization) -> None:
    tasks.send_membership_denied(str(applicant.id), reason="We're full", message="Try again in spring")

    [message] = mail.outbox
    assert "Reason: We're full" in message.body
    assert "Try again in spring" in message.body
    assert organization.contact_email in message.body


def test_request_confirmation(applicant: MemberProfile) -> None:
    tasks.send_membership_request_received(str(applicant.id))

    [message] = mail.outbox
    assert message.subject == "Your membership request for Sample Charity"
    assert message.to == ["applicant@example.com"]
