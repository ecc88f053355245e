"""Member invitations.

An invitation is a disabled account with an INVITED membership and a signed,
short-lived token mailed to the invitee. Accepting the token sets the password
and activates the membership.
"""

import uuid

import structlog
from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from accounts.jwt import create_token, token_to_payload
from accounts.models import KinshipUser
from events import tasks
from events.exceptions import InvalidStateError
from events.models import MemberProfile
from events.schema import MemberInviteJWTPayloadSchema
from events.service import membership_service, policy
from events.service.membership_service import MemberAction
from events.service.notification_service import dispatch
from events.service.policy import Capability

logger = structlog.get_logger(__name__)

INVALID_INVITE_TOKEN = "Invalid or expired invite token"


def create_invite_token(profile: MemberProfile) -> str:
    """Sign an invitation token for an invited membership."""
    payload = MemberInviteJWTPayloadSchema(
        type="member_invite",
        organization_id=profile.organization_id,
        user_id=profile.user_id,
        member_id=profile.id,
        email=profile.user.email,
        exp=timezone.now() + settings.INVITE_TOKEN_LIFETIME,
    )
    return create_token(payload.model_dump(mode="json"), settings.SECRET_KEY, settings.JWT_ALGORITHM)


@transaction.atomic
def invite_member(
    actor: KinshipUser,
    *,
    email: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> MemberProfile:
    """Invite someone to join the actor's organization and email them the link."""
    policy.require(actor, Capability.MANAGE_MEMBERS)
    organization = actor.organization
    assert organization is not None
    profile = membership_service.create_membership(
        organization,
        MemberAction.INVITE,
        actor=actor,
        email=email,
        first_name=first_name or "",
        last_name=last_name or "",
    )
    token = create_invite_token(profile)
    dispatch(tasks.send_member_invite, member_id=str(profile.id), token=token)
    logger.info("member_invited", member_id=str(profile.id), organization_id=str(organization.id))
    return profile


@transaction.atomic
def resend_invite(actor: KinshipUser, member_id: uuid.UUID) -> MemberProfile:
    """Send a fresh invitation link to a member who has not accepted yet."""
    policy.require(actor, Capability.MANAGE_MEMBERS)
    profile = membership_service.get_member(actor, member_id)
    if profile.membership_status != MemberProfile.MembershipStatus.INVITED:
        raise InvalidStateError("Only invited members can be sent a new invitation.")
    profile.invited_at = timezone.now()
    profile.save(update_fields=["invited_at", "updated_at"])
    dispatch(tasks.send_member_invite, member_id=str(profile.id), token=create_invite_token(profile))
    logger.info("member_invite_resent", member_id=str(profile.id))
    return profile


@transaction.atomic
def accept_invite(token: str, password: str) -> MemberProfile:
    """Set the invitee's password and activate their membership.

    Raises:
        AuthenticationFailed: the token is invalid, expired, of another kind or already used.
        ValidationError: the password does not pass the configured validators.
    """
    payload = token_to_payload(token, MemberInviteJWTPayloadSchema, error_message=INVALID_INVITE_TOKEN)
    profile = (
        MemberProfile.objects.select_related("user", "organization")
        .filter(id=payload.member_id, user_id=payload.user_id, organization_id=payload.organization_id)
        .first()
    )
    if profile is None or profile.user.email != payload.email.lower():
        logger.warning("invite_token_unknown_member", member_id=str(payload.member_id))
        raise InvalidStateError("This invitation is no longer valid.")
    if profile.membership_status != MemberProfile.MembershipStatus.INVITED:
        raise InvalidStateError("This invitation has already been used.", status=str(profile.membership_status))

    user = profile.user
    try:
        validate_password(password, user=user)
    except ValidationError as e:
        raise ValidationError({"password": e.messages}) from e
    user.set_password(password)
    user.email_verified = True
    user.email_verified_at = timezone.now()
    user.save(update_fields=["password", "email_verified", "email_verified_at"])

    profile = membership_service.apply_transition(profile, MemberAction.ACCEPT_INVITE, actor=user)
    logger.info("member_invite_accepted", member_id=str(profile.id))
    return profile
