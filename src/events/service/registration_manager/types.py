"""Types for the registration manager."""

import typing as t
import uuid
from collections import Counter

from pydantic import BaseModel, ConfigDict, Field

from events.models import RegistrantRef, Registration


class RegistrationEntry(BaseModel):
    """One registrant of a batch, with the answers collected for them."""

    registrant: RegistrantRef
    custom_data: dict[str, t.Any] = Field(default_factory=dict)
    notes: str = ""


class CapacitySnapshot(BaseModel):
    """Occupancy of an event at the time it was computed."""

    event_id: uuid.UUID
    capacity: int
    max_capacity: int | None
    waitlist_enabled: bool
    requires_approval: bool
    occupancy: int
    waitlisted: int
    available_spots: int
    waitlist_spots: int
    can_register: bool
    can_waitlist: bool


class RegistrationSummary(BaseModel):
    total: int = 0
    confirmed: int = 0
    pending: int = 0
    waitlisted: int = 0
    cancelled: int = 0
    checked_in: int = 0

    @classmethod
    def from_registrations(cls, registrations: t.Iterable[Registration]) -> "RegistrationSummary":
        registrations = list(registrations)
        counts = Counter(str(r.status) for r in registrations)
        return cls(
            total=len(registrations),
            confirmed=counts[Registration.Status.CONFIRMED.value],
            pending=counts[Registration.Status.PENDING.value],
            waitlisted=counts[Registration.Status.WAITLISTED.value],
            cancelled=counts[Registration.Status.CANCELLED.value],
            checked_in=sum(1 for r in registrations if r.checked_in),
        )


class EventRegistrations(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    registrations: list[Registration]
    summary: RegistrationSummary


class CheckInResult(BaseModel):
    checked_in: list[uuid.UUID]
    already_checked_in: list[uuid.UUID]

    @property
    def message(self) -> str:
        return f"Successfully checked in {len(self.checked_in)} attendees"
