import pytest

from accounts.models import KinshipUser
from events.exceptions import NotFoundError, PermissionDeniedError
from events.models import Event, FamilyMember, MemberProfile, Registration
from events.schema import FamilyMemberCreateSchema, FamilyMemberUpdateSchema
from events.service import family_service

pytestmark = pytest.mark.django_db


class TestFamilyMembers:
    def test_member_adds_family_member(self, member_user: KinshipUser, member_profile: MemberProfile) -> None:
        payload = FamilyMemberCreateSchema(first_name="Sam", last_name="Member", relationship="spouse")

        family_member = family_service.add_family_member(member_user, member_profile.id, payload)

        assert family_member.member == member_profile
        assert family_member.organization_id == member_profile.organization_id
        assert family_member.relationship == FamilyMember.Relationship.SPOUSE
        assert family_member.is_active is True

    def test_member_cannot_add_to_another_member(
        self, member_user: KinshipUser, other_member_profile: MemberProfile
    ) -> None:
        payload = FamilyMemberCreateSchema(first_name="Sam", last_name="Other")

        with pytest.raises(PermissionDeniedError):
            family_service.add_family_member(member_user, other_member_profile.id, payload)

    def test_admin_adds_to_any_member(self, org_admin: KinshipUser, member_profile: MemberProfile) -> None:
        payload = FamilyMemberCreateSchema(first_name="Pat", last_name="Member")

        family_member = family_service.add_family_member(org_admin, member_profile.id, payload)

        assert family_member.member == member_profile

    def test_staff_cannot_manage_family(self, event_staff: KinshipUser, member_profile: MemberProfile) -> None:
        with pytest.raises(PermissionDeniedError):
            family_service.add_family_member(
                event_staff, member_profile.id, FamilyMemberCreateSchema(first_name="A", last_name="B")
            )

    def test_update(self, member_user: KinshipUser, family_member: FamilyMember) -> None:
        updated = family_service.update_family_member(
            member_user, family_member.id, FamilyMemberUpdateSchema(allergies="gluten")
        )

        assert updated.allergies == "gluten"
        assert updated.first_name == "Kid"

    def test_remove_is_soft_and_keeps_registrations(
        self, member_user: KinshipUser, member_profile: MemberProfile, family_member: FamilyMember, event: Event
    ) -> None:
        registration = Registration.objects.create(
            event=event,
            organization=member_profile.organization,
            family_member=family_member,
            status=Registration.Status.CONFIRMED,
        )

        family_service.remove_family_member(member_user, family_member.id)

        family_member.refresh_from_db()
        assert family_member.is_active is False
        assert Registration.objects.filter(pk=registration.pk).exists()
        assert list(family_service.list_family_members(member_user, member_profile.id)) == []
        with pytest.raises(NotFoundError):
            family_service.update_family_member(member_user, family_member.id, FamilyMemberUpdateSchema(notes="x"))

    def test_list_others_family_requires_view_members(
        self,
        member_user: KinshipUser,
        event_staff: KinshipUser,
        other_member_profile: MemberProfile,
    ) -> None:
        FamilyMember.objects.create(
            member=other_member_profile,
            organization=other_member_profile.organization,
            first_name="Lee",
            last_name="Other",
        )

        assert family_service.list_family_members(event_staff, other_member_profile.id).count() == 1
        with pytest.raises(PermissionDeniedError):
            family_service.list_family_members(member_user, other_member_profile.id)

    def test_foreign_family_member_is_not_found(self, foreign_admin: KinshipUser, family_member: FamilyMember) -> None:
        with pytest.raises(NotFoundError):
            family_service.remove_family_member(foreign_admin, family_member.id)
