import typing as t
from enum import StrEnum
from uuid import UUID

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from pydantic import BaseModel, ConfigDict

from common.models import TimeStampedModel

from .event import Event
from .member import FamilyMember, MemberProfile
from .organization import Organization


class RegistrantKind(StrEnum):
    MEMBER = "member"
    FAMILY_MEMBER = "family_member"


class RegistrantRef(BaseModel):
    """Who a registration is for: a member or one of their family members."""

    model_config = ConfigDict(frozen=True)

    kind: RegistrantKind
    id: UUID

    @classmethod
    def member(cls, member_id: UUID) -> "RegistrantRef":
        return cls(kind=RegistrantKind.MEMBER, id=member_id)

    @classmethod
    def family_member(cls, family_member_id: UUID) -> "RegistrantRef":
        return cls(kind=RegistrantKind.FAMILY_MEMBER, id=family_member_id)

    def as_lookup(self) -> dict[str, UUID]:
        """Keyword arguments selecting this registrant on a Registration queryset."""
        if self.kind == RegistrantKind.MEMBER:
            return {"member_id": self.id}
        return {"family_member_id": self.id}


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def active(self) -> t.Self:
        """Registrations that are not cancelled."""
        return self.exclude(status=Registration.Status.CANCELLED)

    def occupying(self) -> t.Self:
        """Registrations that count against the event capacity."""
        return self.filter(status__in=Registration.OCCUPYING_STATUSES)

    def for_registrant(self, registrant: RegistrantRef) -> t.Self:
        return self.filter(**registrant.as_lookup())

    def with_registrants(self) -> t.Self:
        return self.select_related("member__user", "family_member", "event")


class Registration(TimeStampedModel):
    """A registrant's place at an event. Cancellation is a status, rows are never deleted."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        WAITLISTED = "waitlisted", "Waitlisted"
        CANCELLED = "cancelled", "Cancelled"

    OCCUPYING_STATUSES: t.ClassVar[tuple[str, ...]] = ("confirmed", "pending")

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="registrations")
    member = models.ForeignKey(
        MemberProfile, on_delete=models.CASCADE, null=True, blank=True, related_name="registrations"
    )
    family_member = models.ForeignKey(
        FamilyMember, on_delete=models.CASCADE, null=True, blank=True, related_name="registrations"
    )
    status = models.CharField(max_length=20, choices=Status.choices, db_index=True)
    registered_at = models.DateTimeField(default=timezone.now, db_index=True)
    registered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    custom_data = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_in_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["registered_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(member__isnull=False, family_member__isnull=True)
                    | Q(member__isnull=True, family_member__isnull=False)
                ),
                name="registration_exactly_one_registrant",
            ),
            models.CheckConstraint(
                condition=Q(checked_in=False) | Q(status="confirmed"),
                name="registration_check_in_requires_confirmed",
            ),
            models.UniqueConstraint(
                fields=["event", "member"],
                condition=Q(member__isnull=False) & ~Q(status="cancelled"),
                name="unique_active_member_registration",
                violation_error_message="This member is already registered for the event.",
            ),
            models.UniqueConstraint(
                fields=["event", "family_member"],
                condition=Q(family_member__isnull=False) & ~Q(status="cancelled"),
                name="unique_active_family_member_registration",
                violation_error_message="This family member is already registered for the event.",
            ),
        ]

    @property
    def registrant(self) -> RegistrantRef:
        if self.member_id is not None:
            return RegistrantRef.member(self.member_id)
        return RegistrantRef.family_member(t.cast(UUID, self.family_member_id))

    @property
    def registrant_name(self) -> str:
        if self.member_id is not None:
            return self.member.full_name  # type: ignore[union-attr]
        return self.family_member.full_name  # type: ignore[union-attr]

    def __str__(self) -> str:
        return f"{self.registrant.kind}:{self.registrant.id} @ {self.event_id} ({self.status})"
