import typing as t

import pytest
from django.core.exceptions import ValidationError
from ninja.errors import HttpError
from ninja_jwt.tokens import AccessToken, RefreshToken

from accounts import schema
from accounts.models import KinshipUser
from accounts.service import auth as auth_service
from events.exceptions import DuplicateMemberError, InvalidStateError, NotFoundError, PermissionDeniedError
from events.models import MemberProfile, Organization

pytestmark = pytest.mark.django_db

PASSWORD = "Str0ng-pass!"


class TestAuthenticate:
    def test_valid_credentials(self, member_user: KinshipUser) -> None:
        assert auth_service.authenticate("Member@Sample.org", PASSWORD) == member_user

    def test_wrong_password(self, member_user: KinshipUser) -> None:
        with pytest.raises(HttpError) as exc_info:
            auth_service.authenticate("member@sample.org", "wrong")

        assert exc_info.value.status_code == 401

    def test_unknown_email(self, organization: Organization) -> None:
        with pytest.raises(HttpError) as exc_info:
            auth_service.authenticate("nobody@sample.org", PASSWORD)

        assert exc_info.value.status_code == 401

    @pytest.mark.parametrize(
        "status",
        [
            MemberProfile.MembershipStatus.INVITED,
            MemberProfile.MembershipStatus.PENDING_APPROVAL,
            MemberProfile.MembershipStatus.INACTIVE,
        ],
    )
    def test_disabled_memberships_cannot_log_in(
        self, member_factory: t.Callable[..., MemberProfile], status: str
    ) -> None:
        member_factory(email="disabled@sample.org", status=status)

        with pytest.raises(HttpError) as exc_info:
            auth_service.authenticate("disabled@sample.org", PASSWORD)

        assert exc_info.value.status_code == 401
        assert str(exc_info.value) == auth_service.INVALID_CREDENTIALS

    def test_inactive_organization(self, organization: Organization, member_user: KinshipUser) -> None:
        organization.is_active = False
        organization.save()

        with pytest.raises(HttpError):
            auth_service.authenticate("member@sample.org", PASSWORD)

    def test_same_email_in_two_organizations_needs_organization(
        self,
        member_factory: t.Callable[..., MemberProfile],
        other_organization: Organization,
    ) -> None:
        member_factory(email="twice@example.com")
        elsewhere = member_factory(email="twice@example.com", organization=other_organization)

        with pytest.raises(HttpError) as exc_info:
            auth_service.authenticate("twice@example.com", PASSWORD)

        assert exc_info.value.status_code == 400
        assert auth_service.authenticate("twice@example.com", PASSWORD, "other-charity") == elsewhere.user


class TestTokens:
    def test_token_pair_carries_claims(self, org_admin: KinshipUser) -> None:
        pair = auth_service.get_token_pair_for_user(org_admin)

        access = AccessToken(pair.access)  # type: ignore[arg-type]
        refresh = RefreshToken(pair.refresh)  # type: ignore[arg-type]
        assert access["organization_id"] == str(org_admin.organization_id)
        assert access["role"] == "org_admin"
        assert access["type"] == "session"
        assert refresh["email"] == "admin@sample.org"
        assert pair.username == "admin@sample.org"
        org_admin.refresh_from_db()
        assert org_admin.last_login is not None


class TestStaffAdministration:
    def test_create_staff_user(self, org_admin: KinshipUser) -> None:
        payload = schema.StaffUserCreateSchema(
            email="Helper@Sample.org", first_name="Helpful", last_name="Helper", password="Vol-unteer-2026"
        )

        user = auth_service.create_staff_user(org_admin, payload)

        assert user.email == "helper@sample.org"
        assert user.role == KinshipUser.Role.EVENT_STAFF
        assert user.organization_id == org_admin.organization_id
        assert user.is_active is True
        assert user.check_password("Vol-unteer-2026")
        assert user.member_profile.membership_status == MemberProfile.MembershipStatus.ACTIVE

    def test_duplicate_email(self, org_admin: KinshipUser, member_user: KinshipUser) -> None:
        payload = schema.StaffUserCreateSchema(
            email="member@sample.org", first_name="A", last_name="B", password="Vol-unteer-2026"
        )

        with pytest.raises(DuplicateMemberError):
            auth_service.create_staff_user(org_admin, payload)

    def test_weak_password(self, org_admin: KinshipUser) -> None:
        payload = schema.StaffUserCreateSchema(email="x@sample.org", first_name="A", last_name="B", password="password")

        with pytest.raises(ValidationError) as exc_info:
            auth_service.create_staff_user(org_admin, payload)

        assert "password" in exc_info.value.message_dict

    def test_staff_cannot_create_users(self, event_staff: KinshipUser) -> None:
        payload = schema.StaffUserCreateSchema(
            email="y@sample.org", first_name="A", last_name="B", password="Vol-unteer-2026"
        )

        with pytest.raises(PermissionDeniedError):
            auth_service.create_staff_user(event_staff, payload)

    def test_update_role(self, org_admin: KinshipUser, member_user: KinshipUser) -> None:
        user = auth_service.update_user_role(org_admin, member_user.id, KinshipUser.Role.EVENT_STAFF)

        assert user.role == KinshipUser.Role.EVENT_STAFF
        member_user.refresh_from_db()
        assert member_user.role == KinshipUser.Role.EVENT_STAFF

    def test_cannot_change_own_role(self, org_admin: KinshipUser) -> None:
        with pytest.raises(InvalidStateError):
            auth_service.update_user_role(org_admin, org_admin.id, KinshipUser.Role.MEMBER)

    def test_foreign_user_is_not_found(self, org_admin: KinshipUser, foreign_admin: KinshipUser) -> None:
        with pytest.raises(NotFoundError):
            auth_service.update_user_role(org_admin, foreign_admin.id, KinshipUser.Role.MEMBER)
