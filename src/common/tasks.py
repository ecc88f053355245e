"""Common tasks."""

from smtplib import SMTPException

import structlog
from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage

from common.models import EmailLog

logger = structlog.get_logger(__name__)


@shared_task(autoretry_for=(SMTPException,), retry_backoff=True, max_retries=3)
def send_email(*, to: str | list[str], subject: str, body: str, reply_to: str | None = None) -> None:
    """Send a plain-text email and log a compressed copy per recipient.

    A single recipient is addressed directly. Several recipients are put in BCC so
    that they do not see each other's addresses.

    Args:
        to (str | list[str]): The email address or addresses.
        subject (str): The email subject.
        body (str): The email body.
        reply_to (str | None): Address replies should go to, usually the organization's contact email.
    """
    recipients = [to] if isinstance(to, str) else list(to)
    if not recipients:
        logger.warning("email_without_recipients", subject=subject)
        return
    message = EmailMessage(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients if len(recipients) == 1 else None,
        bcc=recipients if len(recipients) > 1 else None,
        reply_to=[reply_to] if reply_to else None,
    )
    message.send(fail_silently=False)
    EmailLog.objects.bulk_create([EmailLog(to=recipient, subject=subject, body=body) for recipient in recipients])
    logger.info("email_sent", recipients=len(recipients), subject=subject)
