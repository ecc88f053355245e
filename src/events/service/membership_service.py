"""Member lifecycle.

``TRANSITIONS`` lists every allowed (status, action) pair. Status changes of an
existing membership go through ``apply_transition``, which keeps the status
timestamps, the account-enabled flag and the audit log consistent.
"""

import typing as t
import uuid
from enum import StrEnum

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from accounts.models import KinshipUser
from events import tasks
from events.exceptions import DuplicateMemberError, InvalidStateError, NotFoundError, PermissionDeniedError
from events.models import AuditLog, FamilyMember, MemberProfile, Organization
from events.schema import MemberProfileUpdateSchema
from events.service import audit, policy, update_db_instance
from events.service.notification_service import dispatch
from events.service.policy import Capability

logger = structlog.get_logger(__name__)

Status = MemberProfile.MembershipStatus

INACTIVATION_REASON_MIN_LENGTH = 5
INACTIVATION_REASON_MAX_LENGTH = 500


class MemberAction(StrEnum):
    INVITE = "invite"
    REQUEST = "request"
    ACCEPT_INVITE = "accept_invite"
    APPROVE = "approve"
    DENY = "deny"
    INACTIVATE = "inactivate"
    ACTIVATE = "activate"


# (current status, action) -> new status. ``None`` is "no membership record yet".
TRANSITIONS: dict[tuple[str | None, str], str] = {
    (None, "invite"): "invited",
    (None, "request"): "pending_approval",
    ("invited", "accept_invite"): "active",
    ("pending_approval", "approve"): "active",
    ("pending_approval", "deny"): "inactive",
    ("active", "inactivate"): "inactive",
    ("inactive", "activate"): "active",
}

AUDIT_ACTIONS: dict[str, AuditLog.Action] = {
    "invite": AuditLog.Action.INVITE_SENT,
    "request": AuditLog.Action.REGISTRATION_REQUESTED,
    "accept_invite": AuditLog.Action.INVITE_ACCEPTED,
    "approve": AuditLog.Action.MEMBER_APPROVED,
    "deny": AuditLog.Action.MEMBER_DENIED,
    "inactivate": AuditLog.Action.MEMBER_INACTIVATED,
    "activate": AuditLog.Action.MEMBER_ACTIVATED,
}

EXISTING_RECORD_MESSAGES: dict[str, str] = {
    "active": "This email already belongs to an active member.",
    "pending_approval": "This email has already submitted a registration request.",
    "invited": "This email has already been invited.",
}


def next_status(current: str | None, action: MemberAction) -> str:
    """The status ``action`` leads to from ``current``.

    Raises:
        InvalidStateError: if the pair is not in the transition table.
    """
    target = TRANSITIONS.get((None if current is None else str(current), str(action)))
    if target is None:
        raise InvalidStateError(
            f"Cannot {action.value.replace('_', ' ')} a membership that is {current}.",
            status=current,
            action=action.value,
        )
    return target


@transaction.atomic
def apply_transition(
    profile: MemberProfile,
    action: MemberAction,
    *,
    actor: KinshipUser | None,
    reason: str = "",
    message: str = "",
) -> MemberProfile:
    """Move an existing membership through ``action``.

    The profile row is locked for the duration of the transaction, so two admins
    deciding the same request cannot both succeed.
    """
    profile = MemberProfile.objects.select_for_update().select_related("user", "organization").get(pk=profile.pk)
    previous = str(profile.membership_status)
    target = next_status(previous, action)

    now = timezone.now()
    match action:
        case MemberAction.ACCEPT_INVITE:
            profile.activated_at = now
        case MemberAction.APPROVE:
            profile.approved_at = now
            profile.activated_at = now
            profile.decision_message = message
        case MemberAction.DENY:
            profile.denied_at = now
            profile.denial_reason = reason
            profile.decision_message = message
        case MemberAction.INACTIVATE:
            profile.inactivated_at = now
            profile.inactivated_reason = reason
        case MemberAction.ACTIVATE:
            profile.activated_at = now
            profile.inactivated_at = None
            profile.inactivated_reason = ""
    profile.membership_status = target
    profile.save()

    user = profile.user
    user.is_active = target == Status.ACTIVE.value
    user.save(update_fields=["is_active"])

    audit.record(
        organization=profile.organization,
        actor=actor,
        action=AUDIT_ACTIONS[str(action)],
        target=profile,
        previous_status=previous,
        new_status=target,
        reason=reason,
        message=message,
    )
    logger.info(
        "member_status_changed",
        member_id=str(profile.id),
        action=str(action),
        previous_status=previous,
        new_status=target,
        actor_id=str(actor.id) if actor else None,
    )
    return profile


def ensure_email_available(organization: Organization, email: str) -> None:
    """Refuse a new membership for an email that already has a record in the organization.

    Raises:
        InvalidStateError: the existing record is inactive; only an admin may reactivate it.
        DuplicateMemberError: the existing record is invited, pending or active.
    """
    email = email.strip().lower()
    profile = MemberProfile.objects.filter(organization=organization, user__email=email).first()
    if profile is not None:
        status = str(profile.membership_status)
        if status == Status.INACTIVE.value:
            raise InvalidStateError(
                "This email belongs to a deactivated membership. Please contact an administrator.",
                status=status,
            )
        raise DuplicateMemberError(EXISTING_RECORD_MESSAGES[status], status=status)
    if KinshipUser.objects.filter(organization=organization, email=email).exists():
        raise DuplicateMemberError("An account with this email already exists in the organization.")


def create_membership(
    organization: Organization,
    action: MemberAction,
    *,
    actor: KinshipUser | None,
    email: str,
    first_name: str = "",
    last_name: str = "",
    **profile_fields: t.Any,
) -> MemberProfile:
    """Create a disabled account and its first membership record.

    Must run inside the caller's transaction.
    """
    ensure_email_available(organization, email)
    status = next_status(None, action)
    now = timezone.now()
    timestamps = {"invited_at": now} if action == MemberAction.INVITE else {"registration_requested_at": now}

    user = KinshipUser.objects.create_org_user(
        organization,
        email,
        password=None,
        first_name=first_name or "",
        last_name=last_name or "",
        role=KinshipUser.Role.MEMBER,
        is_active=False,
    )
    profile = MemberProfile.objects.create(
        user=user,
        organization=organization,
        membership_status=status,
        **timestamps,
        **profile_fields,
    )
    audit.record(
        organization=organization,
        actor=actor,
        action=AUDIT_ACTIONS[str(action)],
        target=profile,
        previous_status=None,
        new_status=status,
    )
    return profile


def _get_profile(actor: KinshipUser, member_id: uuid.UUID) -> MemberProfile:
    profile = (
        MemberProfile.objects.select_related("user", "organization")
        .filter(id=member_id, organization_id=actor.organization_id)
        .first()
    )
    if profile is None:
        raise NotFoundError("Member not found.")
    return profile


# ---- Admin decisions ----


def decide_membership(
    actor: KinshipUser,
    member_id: uuid.UUID,
    *,
    approve: bool,
    message: str = "",
    denial_reason: str = "",
) -> MemberProfile:
    """Approve or deny a pending membership request and notify the applicant."""
    policy.require(actor, Capability.MANAGE_MEMBERS)
    denial_reason = denial_reason.strip()
    if not approve and not denial_reason:
        raise ValidationError({"denial_reason": ["A reason is required when denying a membership request."]})
    profile = _get_profile(actor, member_id)
    with transaction.atomic():
        if approve:
            profile = apply_transition(profile, MemberAction.APPROVE, actor=actor, message=message)
            dispatch(tasks.send_membership_approved, member_id=str(profile.id), message=message)
        else:
            profile = apply_transition(
                profile, MemberAction.DENY, actor=actor, reason=denial_reason, message=message
            )
            dispatch(tasks.send_membership_denied, member_id=str(profile.id), reason=denial_reason, message=message)
    return profile


def inactivate_member(actor: KinshipUser, member_id: uuid.UUID, reason: str) -> MemberProfile:
    """Deactivate an active membership. The member can no longer log in."""
    policy.require(actor, Capability.MANAGE_MEMBERS)
    reason = reason.strip()
    if not INACTIVATION_REASON_MIN_LENGTH <= len(reason) <= INACTIVATION_REASON_MAX_LENGTH:
        raise ValidationError(
            {
                "reason": [
                    f"A reason of {INACTIVATION_REASON_MIN_LENGTH} to "
                    f"{INACTIVATION_REASON_MAX_LENGTH} characters is required."
                ]
            }
        )
    profile = _get_profile(actor, member_id)
    if profile.user_id == actor.id:
        raise InvalidStateError("You cannot deactivate your own membership.")
    return apply_transition(profile, MemberAction.INACTIVATE, actor=actor, reason=reason)


def activate_member(actor: KinshipUser, member_id: uuid.UUID) -> MemberProfile:
    """Reactivate an inactive (deactivated or denied) membership."""
    policy.require(actor, Capability.MANAGE_MEMBERS)
    profile = _get_profile(actor, member_id)
    return apply_transition(profile, MemberAction.ACTIVATE, actor=actor)


# ---- Reading and profile upkeep ----


def list_members(
    actor: KinshipUser,
    *,
    status: MemberProfile.MembershipStatus | None = None,
    search: str | None = None,
) -> QuerySet[MemberProfile]:
    policy.require(actor, Capability.VIEW_MEMBERS)
    qs = MemberProfile.objects.filter(organization_id=actor.organization_id).select_related("user")
    if status:
        qs = qs.with_status(status)
    if search:
        qs = qs.filter(
            Q(user__email__icontains=search)
            | Q(user__first_name__icontains=search)
            | Q(user__last_name__icontains=search)
        )
    return qs.order_by("user__last_name", "user__first_name", "user__email")


def get_member(actor: KinshipUser, member_id: uuid.UUID) -> MemberProfile:
    """A membership of the actor's organization. Members may only read their own."""
    profile = _get_profile(actor, member_id)
    if profile.user_id != actor.id and not policy.allows(actor, Capability.VIEW_MEMBERS):
        raise PermissionDeniedError("You can only view your own profile.")
    return profile


def get_own_profile(actor: KinshipUser) -> MemberProfile:
    profile = MemberProfile.objects.select_related("user", "organization").filter(user=actor).first()
    if profile is None:
        raise NotFoundError("Member profile not found.")
    return profile


@transaction.atomic
def update_member_profile(
    actor: KinshipUser, member_id: uuid.UUID, payload: MemberProfileUpdateSchema
) -> MemberProfile:
    """Update contact and personal details. Members may only update their own."""
    profile = _get_profile(actor, member_id)
    if profile.user_id != actor.id and not policy.allows(actor, Capability.MANAGE_MEMBERS):
        raise PermissionDeniedError("You can only update your own profile.")

    data = payload.model_dump(exclude_unset=True)
    user_fields = {k: data.pop(k) for k in ("first_name", "last_name") if k in data}
    if user_fields:
        user = profile.user
        for key, value in user_fields.items():
            setattr(user, key, value)
        user.save(update_fields=list(user_fields))
    profile = update_db_instance(profile, **data)
    logger.info("member_profile_updated", member_id=str(profile.id), fields=sorted([*data, *user_fields]))
    return profile


def pending_approvals(actor: KinshipUser) -> QuerySet[MemberProfile]:
    """Membership requests waiting for a decision, newest first."""
    policy.require(actor, Capability.MANAGE_MEMBERS)
    return (
        MemberProfile.objects.filter(organization_id=actor.organization_id)
        .with_status(Status.PENDING_APPROVAL)
        .select_related("user")
        .order_by("-registration_requested_at")
    )


def member_stats(actor: KinshipUser) -> dict[str, int]:
    policy.require(actor, Capability.VIEW_MEMBERS)
    counts = MemberProfile.objects.filter(organization_id=actor.organization_id).aggregate(
        total_members=Count("id"),
        active_members=Count("id", filter=Q(membership_status=Status.ACTIVE)),
        inactive_members=Count("id", filter=Q(membership_status=Status.INACTIVE)),
        invited_members=Count("id", filter=Q(membership_status=Status.INVITED)),
        pending_members=Count("id", filter=Q(membership_status=Status.PENDING_APPROVAL)),
    )
    counts["total_family_members"] = (
        FamilyMember.objects.active()
        .filter(organization_id=actor.organization_id, member__membership_status=Status.ACTIVE)
        .count()
    )
    counts["total_people"] = counts["active_members"] + counts["total_family_members"]
    return counts
