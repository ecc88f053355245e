"""Celery tasks for membership notifications.

Each task loads what it needs by id, renders a text template and hands the
message to ``common.tasks.send_email``.
"""

from uuid import UUID

import structlog
from celery import shared_task
from django.conf import settings
from django.template.loader import render_to_string

from accounts.models import KinshipUser
from common.tasks import send_email

from .models import MemberProfile

logger = structlog.get_logger(__name__)


def _frontend_url(path: str) -> str:
    return settings.FRONTEND_BASE_URL.rstrip("/") + path


def _profile(member_id: str | UUID) -> MemberProfile:
    return MemberProfile.objects.select_related("user", "organization").get(pk=member_id)


def _mail_member(profile: MemberProfile, subject: str, body: str) -> None:
    send_email(to=profile.email, subject=subject, body=body, reply_to=profile.organization.contact_email or None)


@shared_task
def send_member_invite(member_id: str, token: str) -> None:
    """Send the invitation link to an invited member."""
    profile = _profile(member_id)
    organization = profile.organization
    subject = f"You're invited to join {organization.name}"
    body = render_to_string(
        "events/emails/member_invite_body.txt",
        {
            "name": profile.user.first_name,
            "organization_name": organization.name,
            "accept_link": _frontend_url(f"/invite/accept?token={token}"),
            "expires_in_hours": int(settings.INVITE_TOKEN_LIFETIME.total_seconds() // 3600),
        },
    )
    _mail_member(profile, subject, body)
    logger.info("member_invite_sent", member_id=str(profile.id), organization_id=str(organization.id))


@shared_task
def send_membership_request_received(member_id: str) -> None:
    """Confirm to the applicant that their request arrived."""
    profile = _profile(member_id)
    organization = profile.organization
    body = render_to_string(
        "events/emails/membership_request_received_body.txt",
        {"name": profile.user.display_name, "organization_name": organization.name},
    )
    _mail_member(profile, f"Your membership request for {organization.name}", body)
    logger.info("membership_request_confirmation_sent", member_id=str(profile.id))


@shared_task
def notify_admins_of_membership_request(member_id: str) -> None:
    """Tell the organization's administrators about a new membership request."""
    profile = _profile(member_id)
    organization = profile.organization
    admin_emails = list(KinshipUser.objects.org_admins(organization).values_list("email", flat=True))
    if not admin_emails:
        logger.warning("membership_request_no_admins", organization_id=str(organization.id))
        return
    body = render_to_string(
        "events/emails/membership_request_admin_notice_body.txt",
        {
            "applicant_name": profile.user.display_name,
            "applicant_email": profile.email,
            "organization_name": organization.name,
            "message": profile.registration_message,
            "review_link": _frontend_url("/admin/members/pending"),
        },
    )
    send_email(to=admin_emails, subject=f"New membership request: {profile.user.display_name}", body=body)
    logger.info("membership_request_admin_notice_sent", member_id=str(profile.id), recipients=len(admin_emails))


@shared_task
def send_membership_approved(member_id: str, message: str = "") -> None:
    profile = _profile(member_id)
    organization = profile.organization
    body = render_to_string(
        "events/emails/membership_approved_body.txt",
        {
            "name": profile.user.display_name,
            "organization_name": organization.name,
            "message": message,
            "login_link": _frontend_url("/login"),
        },
    )
    _mail_member(profile, f"Welcome to {organization.name}", body)
    logger.info("membership_approved_email_sent", member_id=str(profile.id))


@shared_task
def send_membership_denied(member_id: str, reason: str = "", message: str = "") -> None:
    profile = _profile(member_id)
    organization = profile.organization
    body = render_to_string(
        "events/emails/membership_denied_body.txt",
        {
            "name": profile.user.display_name,
            "organization_name": organization.name,
            "contact_email": organization.contact_email,
            "reason": reason,
            "message": message,
        },
    )
    _mail_member(profile, f"Your membership request for {organization.name}", body)
    logger.info("membership_denied_email_sent", member_id=str(profile.id))
