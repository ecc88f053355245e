"""Tests for member invitations."""

import typing as t
from datetime import timedelta

import pytest
from django.core import mail
from django.core.exceptions import ValidationError
from django.utils import timezone
from freezegun import freeze_time
from ninja_extra.exceptions import AuthenticationFailed

from accounts.jwt import create_token
from accounts.models import KinshipUser
from events.exceptions import DuplicateMemberError, InvalidStateError, PermissionDeniedError
from events.models import AuditLog, MemberProfile
from events.service import invitation_service
from events.service.invitation_service import INVALID_INVITE_TOKEN

pytestmark = pytest.mark.django_db

Status = MemberProfile.MembershipStatus

PASSWORD = "A-much-better-passw0rd"


@pytest.fixture
def invited(org_admin: KinshipUser) -> MemberProfile:
    return invitation_service.invite_member(org_admin, email="Invitee@Example.com", first_name="Ivy")


class TestInviteMember:
    def test_invite_creates_disabled_account_and_mails_link(
        self, org_admin: KinshipUser, settings: t.Any, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        settings.FRONTEND_BASE_URL = "https://app.example.org"

        with django_capture_on_commit_callbacks(execute=True):
            profile = invitation_service.invite_member(org_admin, email="Invitee@Example.com", first_name="Ivy")

        assert profile.membership_status == Status.INVITED
        assert profile.invited_at is not None
        assert profile.user.email == "invitee@example.com"
        assert profile.user.is_active is False
        assert profile.user.has_usable_password() is False
        assert AuditLog.objects.filter(target_id=profile.id, action=AuditLog.Action.INVITE_SENT).exists()

        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ["invitee@example.com"]
        assert message.subject == "You're invited to join Sample Charity"
        assert "https://app.example.org/invite/accept?token=" in message.body

    def test_member_cannot_invite(self, member_user: KinshipUser) -> None:
        with pytest.raises(PermissionDeniedError):
            invitation_service.invite_member(member_user, email="friend@example.com")

    def test_email_already_invited(self, org_admin: KinshipUser, invited: MemberProfile) -> None:
        with pytest.raises(DuplicateMemberError, match="already been invited"):
            invitation_service.invite_member(org_admin, email="invitee@example.com")

    def test_resend_invite(
        self, org_admin: KinshipUser, invited: MemberProfile, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            invitation_service.resend_invite(org_admin, invited.id)

        assert len(mail.outbox) == 1

    def test_resend_to_active_member_fails(self, org_admin: KinshipUser, member_profile: MemberProfile) -> None:
        with pytest.raises(InvalidStateError):
            invitation_service.resend_invite(org_admin, member_profile.id)


class TestAcceptInvite:
    def test_accept_sets_password_and_activates(self, invited: MemberProfile) -> None:
        token = invitation_service.create_invite_token(invited)

        profile = invitation_service.accept_invite(token, PASSWORD)

        assert profile.membership_status == Status.ACTIVE
        assert profile.activated_at is not None
        user = KinshipUser.objects.get(pk=invited.user_id)
        assert user.is_active is True
        assert user.email_verified is True
        assert user.check_password(PASSWORD)
        entry = AuditLog.objects.get(target_id=invited.id, action=AuditLog.Action.INVITE_ACCEPTED)
        assert entry.actor == user

    def test_token_cannot_be_reused(self, invited: MemberProfile) -> None:
        token = invitation_service.create_invite_token(invited)
        invitation_service.accept_invite(token, PASSWORD)

        with pytest.raises(InvalidStateError, match="already been used"):
            invitation_service.accept_invite(token, "Another-passw0rd!")

    def test_expired_token(self, invited: MemberProfile, settings: t.Any) -> None:
        token = invitation_service.create_invite_token(invited)

        with freeze_time(timezone.now() + settings.INVITE_TOKEN_LIFETIME + timedelta(minutes=1)):
            with pytest.raises(AuthenticationFailed) as exc_info:
                invitation_service.accept_invite(token, PASSWORD)

        assert str(exc_info.value.detail) == INVALID_INVITE_TOKEN
        invited.refresh_from_db()
        assert invited.membership_status == Status.INVITED

    def test_tampered_token(self, invited: MemberProfile) -> None:
        token = invitation_service.create_invite_token(invited)

        with pytest.raises(AuthenticationFailed):
            invitation_service.accept_invite(token.rsplit(".", 1)[0] + ".bad-signature", PASSWORD)

    def test_token_of_another_kind(self, invited: MemberProfile, settings: t.Any) -> None:
        token = create_token(
            {
                "type": "password_reset",
                "organization_id": str(invited.organization_id),
                "user_id": str(invited.user_id),
                "member_id": str(invited.id),
                "email": invited.email,
                "exp": int((timezone.now() + timedelta(hours=1)).timestamp()),
                "aud": settings.JWT_AUDIENCE,
            },
            settings.SECRET_KEY,
            settings.JWT_ALGORITHM,
        )

        with pytest.raises(AuthenticationFailed):
            invitation_service.accept_invite(token, PASSWORD)

    def test_token_without_a_type(self, invited: MemberProfile, settings: t.Any) -> None:
        token = create_token(
            {
                "organization_id": str(invited.organization_id),
                "user_id": str(invited.user_id),
                "member_id": str(invited.id),
                "email": invited.email,
                "exp": int((timezone.now() + timedelta(hours=1)).timestamp()),
                "aud": settings.JWT_AUDIENCE,
            },
            settings.SECRET_KEY,
            settings.JWT_ALGORITHM,
        )

        with pytest.raises(AuthenticationFailed):
            invitation_service.accept_invite(token, PASSWORD)

        invited.refresh_from_db()
        assert invited.membership_status == Status.INVITED

    def test_weak_password_is_rejected(self, invited: MemberProfile) -> None:
        token = invitation_service.create_invite_token(invited)

        with pytest.raises(ValidationError) as exc_info:
            invitation_service.accept_invite(token, "12345678")

        assert "password" in exc_info.value.message_dict
        invited.refresh_from_db()
        assert invited.membership_status == Status.INVITED

    def test_deactivated_invitee_cannot_accept(self, invited: MemberProfile) -> None:
        token = invitation_service.create_invite_token(invited)
        invited.membership_status = Status.INACTIVE
        invited.inactivated_at = timezone.now()
        invited.save()

        with pytest.raises(InvalidStateError):
            invitation_service.accept_invite(token, PASSWORD)
