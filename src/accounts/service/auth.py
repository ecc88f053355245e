"""Authentication and account administration."""

import uuid

import structlog
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from ninja.errors import HttpError
from ninja_jwt.schema import TokenObtainPairOutputSchema
from ninja_jwt.tokens import RefreshToken

from accounts import schema
from accounts.models import KinshipUser
from events.exceptions import DuplicateMemberError, InvalidStateError, NotFoundError
from events.models import MemberProfile, Organization
from events.service import policy
from events.service.policy import Capability

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."


def authenticate(email: str, password: str, organization: str | None = None) -> KinshipUser:
    """Find the account for an email (optionally within one organization) and check its password.

    Disabled accounts cannot log in: invited, pending and inactive members all have
    ``is_active=False`` until they are activated.
    """
    candidates = KinshipUser.objects.filter(email=email.strip().lower()).select_related("organization")
    if organization:
        candidates = candidates.filter(organization__in=Organization.objects.by_identifier(organization))
    users = list(candidates[:2])
    if len(users) > 1:
        logger.info("login_ambiguous_email", email=email)
        raise HttpError(400, "This email belongs to several organizations. Please specify the organization.")
    if not users or not users[0].check_password(password):
        logger.warning("login_failed", email=email, reason="bad_credentials")
        raise HttpError(401, INVALID_CREDENTIALS)
    user = users[0]
    if not user.is_active:
        logger.warning("login_failed", email=email, reason="inactive", user_id=str(user.id))
        raise HttpError(401, INVALID_CREDENTIALS)
    if user.organization is not None and not user.organization.is_active:
        logger.warning("login_failed", email=email, reason="organization_inactive", user_id=str(user.id))
        raise HttpError(401, INVALID_CREDENTIALS)
    return user


def get_token_pair_for_user(user: KinshipUser) -> TokenObtainPairOutputSchema:
    """Get a token pair for the user, carrying role and organization claims."""
    user.last_login = timezone.now()
    user.save(update_fields=["last_login"])

    logger.info("token_pair_generated", user_id=str(user.id), email=user.email)
    token = RefreshToken.for_user(user)
    claims = schema.TokenClaims(
        organization_id=str(user.organization_id) if user.organization_id else None,
        role=str(user.role),
        email=user.email,
    )
    token.payload.update(claims.model_dump(mode="json"))
    token.payload["sub"] = str(user.id)
    return TokenObtainPairOutputSchema(
        username=user.email,
        access=str(token.access_token),  # type: ignore[attr-defined]
        refresh=str(token),
    )


def login(email: str, password: str, organization: str | None = None) -> TokenObtainPairOutputSchema:
    user = authenticate(email, password, organization)
    return get_token_pair_for_user(user)


@transaction.atomic
def create_staff_user(actor: KinshipUser, payload: schema.StaffUserCreateSchema) -> KinshipUser:
    """Create an administrator or event staff account in the actor's organization.

    Staff accounts are enabled right away and carry an active membership record.
    """
    policy.require(actor, Capability.MANAGE_USERS)
    organization = actor.organization
    email = payload.email.strip().lower()
    if KinshipUser.objects.filter(organization=organization, email=email).exists():
        raise DuplicateMemberError("An account with this email already exists in the organization.")
    candidate = KinshipUser(email=email, first_name=payload.first_name, last_name=payload.last_name)
    try:
        validate_password(payload.password, user=candidate)
    except ValidationError as e:
        raise ValidationError({"password": e.messages}) from e

    user = KinshipUser.objects.create_org_user(
        organization,  # type: ignore[arg-type]
        email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        email_verified=True,
        email_verified_at=timezone.now(),
    )
    now = timezone.now()
    MemberProfile.objects.create(
        user=user,
        organization=organization,
        membership_status=MemberProfile.MembershipStatus.ACTIVE,
        approved_at=now,
        activated_at=now,
    )
    logger.info("staff_user_created", user_id=str(user.id), role=str(user.role), created_by=str(actor.id))
    return user


@transaction.atomic
def update_user_role(actor: KinshipUser, user_id: uuid.UUID, role: KinshipUser.Role) -> KinshipUser:
    """Change the role of an account of the actor's organization."""
    policy.require(actor, Capability.MANAGE_USERS)
    user = KinshipUser.objects.select_for_update().filter(id=user_id, organization_id=actor.organization_id).first()
    if user is None:
        raise NotFoundError("User not found.")
    if user.pk == actor.pk:
        raise InvalidStateError("You cannot change your own role.")
    previous_role = user.role
    user.role = role
    user.save(update_fields=["role"])
    logger.info(
        "user_role_updated",
        user_id=str(user.id),
        previous_role=str(previous_role),
        new_role=str(role),
        updated_by=str(actor.id),
    )
    return user
