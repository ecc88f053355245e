from django.conf import settings
from django.db import models

from common.models import TimeStampedModel

from .organization import Organization


class AuditLog(TimeStampedModel):
    """Append-only record of state changes made on behalf of an actor."""

    class Action(models.TextChoices):
        INVITE_SENT = "invite_sent", "Invite sent"
        INVITE_ACCEPTED = "invite_accepted", "Invite accepted"
        REGISTRATION_REQUESTED = "registration_requested", "Registration requested"
        MEMBER_APPROVED = "member_approved", "Member approved"
        MEMBER_DENIED = "member_denied", "Member denied"
        MEMBER_INACTIVATED = "member_inactivated", "Member inactivated"
        MEMBER_ACTIVATED = "member_activated", "Member activated"
        REGISTRATION_UPDATED = "registration_updated", "Registration updated"
        ATTENDEES_CHECKED_IN = "attendees_checked_in", "Attendees checked in"

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="audit_logs")
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="audit_logs"
    )
    action = models.CharField(max_length=40, choices=Action.choices, db_index=True)
    target_type = models.CharField(max_length=64)
    target_id = models.UUIDField(db_index=True)
    payload = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.action} on {self.target_type}:{self.target_id}"
