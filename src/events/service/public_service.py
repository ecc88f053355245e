"""Unauthenticated operations: the public membership request form and its helpers."""

import structlog
from django.db import transaction

from accounts.validators import PHONE_REGEX, ZIP_CODE_REGEX, format_us_phone_number
from events import tasks
from events.exceptions import NotFoundError
from events.models import MemberProfile, Organization
from events.schema import MembershipRequestSchema
from events.service import membership_service
from events.service.membership_service import MemberAction
from events.service.notification_service import dispatch

logger = structlog.get_logger(__name__)


def get_public_organization(identifier: str) -> Organization:
    """An active organization by slug, web address or id."""
    organization = Organization.objects.active().by_identifier(identifier.strip()).first()
    if organization is None:
        raise NotFoundError("Organization not found.")
    return organization


@transaction.atomic
def request_membership(payload: MembershipRequestSchema) -> MemberProfile:
    """Create a membership request awaiting an administrator's decision.

    The applicant gets a confirmation and the organization's administrators a notice,
    both after commit.
    """
    organization = get_public_organization(payload.organization_identifier)
    phone = payload.phone
    if phone and (formatted := format_us_phone_number(phone)):
        phone = formatted[1]
    profile = membership_service.create_membership(
        organization,
        MemberAction.REQUEST,
        actor=None,
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=phone,
        zip_code=payload.zip_code,
        registration_message=payload.message,
    )
    dispatch(tasks.send_membership_request_received, member_id=str(profile.id))
    dispatch(tasks.notify_admins_of_membership_request, member_id=str(profile.id))
    logger.info("membership_requested", member_id=str(profile.id), organization_id=str(organization.id))
    return profile


def validate_phone(value: str) -> tuple[bool, str | None, str | None]:
    """Whether ``value`` is an acceptable phone number, with its national and E.164 forms when it is a US one."""
    value = value.strip()
    if not value or not PHONE_REGEX.fullmatch(value):
        return False, None, None
    formatted = format_us_phone_number(value)
    if formatted is None:
        return True, value, None
    e164, national = formatted
    return True, national, e164


def validate_zip_code(value: str) -> tuple[bool, str | None]:
    value = value.strip()
    if not ZIP_CODE_REGEX.fullmatch(value):
        return False, None
    return True, value
