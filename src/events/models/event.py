import typing as t

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from common.models import TimeStampedModel

from .organization import Organization


class EventQuerySet(models.QuerySet["Event"]):
    def active(self) -> t.Self:
        return self.filter(is_active=True)

    def upcoming(self) -> t.Self:
        return self.filter(starts_at__gt=timezone.now())

    def past(self) -> t.Self:
        return self.filter(starts_at__lte=timezone.now())

    def for_organization(self, organization: Organization) -> t.Self:
        return self.filter(organization=organization)


class Event(TimeStampedModel):
    """An event members (and their families) register for.

    ``capacity`` is the number of occupying registrations an event accepts as
    confirmed. With the waitlist enabled, registrations beyond it are queued
    up to ``max_capacity``. Events are never deleted, only deactivated.
    """

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="events")
    title = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    starts_at = models.DateTimeField(db_index=True)
    ends_at = models.DateTimeField(null=True, blank=True)
    capacity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    max_capacity = models.PositiveIntegerField(null=True, blank=True)
    waitlist_enabled = models.BooleanField(default=True)
    requires_approval = models.BooleanField(default=False)
    is_public = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)
    custom_fields = models.JSONField(default=list, blank=True, help_text="Extra fields collected at registration.")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_events"
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["starts_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(max_capacity__isnull=True) | Q(max_capacity__gte=F("capacity")),
                name="event_max_capacity_gte_capacity",
            ),
            models.CheckConstraint(
                condition=Q(ends_at__isnull=True) | Q(ends_at__gt=F("starts_at")),
                name="event_ends_after_start",
            ),
        ]

    def clean(self) -> None:
        """Validate capacity bounds and the time window."""
        super().clean()
        errors: dict[str, str] = {}
        if self.max_capacity is not None and self.capacity is not None and self.max_capacity < self.capacity:
            errors["max_capacity"] = "Maximum capacity must be greater than or equal to capacity."
        if self.ends_at and self.starts_at and self.ends_at <= self.starts_at:
            errors["ends_at"] = "End date must be after start date."
        if errors:
            raise DjangoValidationError(errors)

    @property
    def has_started(self) -> bool:
        return self.starts_at <= timezone.now()

    def __str__(self) -> str:
        return self.title
