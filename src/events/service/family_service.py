import uuid

import structlog
from django.db import transaction
from django.db.models import QuerySet

from accounts.models import KinshipUser
from events.exceptions import NotFoundError, PermissionDeniedError
from events.models import FamilyMember, MemberProfile
from events.schema import FamilyMemberCreateSchema, FamilyMemberUpdateSchema
from events.service import policy, update_db_instance
from events.service.policy import Capability

logger = structlog.get_logger(__name__)


def _get_member(actor: KinshipUser, member_id: uuid.UUID) -> MemberProfile:
    member = MemberProfile.objects.filter(id=member_id, organization_id=actor.organization_id).first()
    if member is None:
        raise NotFoundError("Member not found.")
    return member


def _check_owner(actor: KinshipUser, member: MemberProfile) -> None:
    if member.user_id != actor.id and not policy.allows(actor, Capability.MANAGE_ANY_FAMILY):
        raise PermissionDeniedError("You can only manage your own family members.")


def _get_family_member(actor: KinshipUser, family_member_id: uuid.UUID) -> FamilyMember:
    family_member = (
        FamilyMember.objects.active()
        .select_related("member")
        .filter(id=family_member_id, organization_id=actor.organization_id)
        .first()
    )
    if family_member is None:
        raise NotFoundError("Family member not found.")
    _check_owner(actor, family_member.member)
    return family_member


def list_family_members(actor: KinshipUser, member_id: uuid.UUID) -> QuerySet[FamilyMember]:
    """Active family members of a member. Staff may list anyone's."""
    member = _get_member(actor, member_id)
    if member.user_id != actor.id and not policy.allows(actor, Capability.VIEW_MEMBERS):
        raise PermissionDeniedError("You can only view your own family members.")
    return member.family_members.active()


@transaction.atomic
def add_family_member(actor: KinshipUser, member_id: uuid.UUID, payload: FamilyMemberCreateSchema) -> FamilyMember:
    policy.require(actor, Capability.MANAGE_FAMILY)
    member = _get_member(actor, member_id)
    _check_owner(actor, member)
    family_member = FamilyMember.objects.create(
        member=member, organization_id=member.organization_id, **payload.model_dump()
    )
    logger.info("family_member_added", family_member_id=str(family_member.id), member_id=str(member.id))
    return family_member


def update_family_member(
    actor: KinshipUser, family_member_id: uuid.UUID, payload: FamilyMemberUpdateSchema
) -> FamilyMember:
    policy.require(actor, Capability.MANAGE_FAMILY)
    family_member = _get_family_member(actor, family_member_id)
    family_member = update_db_instance(family_member, payload)
    logger.info("family_member_updated", family_member_id=str(family_member.id))
    return family_member


def remove_family_member(actor: KinshipUser, family_member_id: uuid.UUID) -> None:
    """Soft-delete a family member. Their past registrations are kept."""
    policy.require(actor, Capability.MANAGE_FAMILY)
    family_member = _get_family_member(actor, family_member_id)
    update_db_instance(family_member, is_active=False)
    logger.info("family_member_removed", family_member_id=str(family_member.id))
