"""Event-related schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, Field

from common.schema import OneToTwoFiftyFiveString, StrippedString
from events.models import Event


class EventSchema(ModelSchema):
    organization_id: UUID

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "description",
            "location",
            "starts_at",
            "ends_at",
            "capacity",
            "max_capacity",
            "waitlist_enabled",
            "requires_approval",
            "is_public",
            "is_active",
            "custom_fields",
            "created_at",
        ]


class EventCreateSchema(Schema):
    title: OneToTwoFiftyFiveString
    description: StrippedString = ""
    location: StrippedString = ""
    starts_at: AwareDatetime
    ends_at: AwareDatetime | None = None
    capacity: int = Field(..., ge=1)
    max_capacity: int | None = Field(None, ge=1)
    waitlist_enabled: bool = True
    requires_approval: bool = False
    is_public: bool = False
    custom_fields: list[dict[str, t.Any]] = Field(default_factory=list)


class EventUpdateSchema(Schema):
    title: OneToTwoFiftyFiveString | None = None
    description: StrippedString | None = None
    location: StrippedString | None = None
    starts_at: AwareDatetime | None = None
    ends_at: AwareDatetime | None = None
    capacity: int | None = Field(None, ge=1)
    max_capacity: int | None = Field(None, ge=1)
    waitlist_enabled: bool | None = None
    requires_approval: bool | None = None
    is_public: bool | None = None
    custom_fields: list[dict[str, t.Any]] | None = None


class EventStatsSchema(Schema):
    total: int
    active: int
    inactive: int
    upcoming: int
    past: int


class CapacitySchema(Schema):
    event_id: UUID
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
