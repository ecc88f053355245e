"""Registration-related schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import Field

from common.schema import StrippedString
from events.models import RegistrantKind, RegistrantRef, Registration
from events.service.registration_manager import RegistrationEntry


class RegistrantInputSchema(Schema):
    type: RegistrantKind
    id: UUID
    custom_data: dict[str, t.Any] = Field(default_factory=dict)
    notes: StrippedString = ""

    def to_entry(self) -> RegistrationEntry:
        return RegistrationEntry(
            registrant=RegistrantRef(kind=self.type, id=self.id),
            custom_data=self.custom_data,
            notes=self.notes,
        )


class RegistrationCreateSchema(Schema):
    registrants: list[RegistrantInputSchema] = Field(..., min_length=1, max_length=50)


class RegistrationSchema(ModelSchema):
    event_id: UUID
    registrant_type: RegistrantKind
    registrant_id: UUID
    registrant_name: str
    checked_in_by_id: UUID | None = None

    class Meta:
        model = Registration
        fields = [
            "id",
            "status",
            "registered_at",
            "custom_data",
            "notes",
            "checked_in",
            "checked_in_at",
        ]

    @staticmethod
    def resolve_registrant_type(obj: Registration) -> str:
        return obj.registrant.kind.value

    @staticmethod
    def resolve_registrant_id(obj: Registration) -> UUID:
        return obj.registrant.id


class RegistrationBatchResponseSchema(Schema):
    message: str
    status: Registration.Status
    registrations: list[RegistrationSchema]


class RegistrationUpdateSchema(Schema):
    status: Registration.Status | None = None
    notes: StrippedString | None = None
    custom_data: dict[str, t.Any] | None = None


class RegistrationSummarySchema(Schema):
    total: int
    confirmed: int
    pending: int
    waitlisted: int
    cancelled: int
    checked_in: int


class EventRegistrationsSchema(Schema):
    registrations: list[RegistrationSchema]
    summary: RegistrationSummarySchema


class CheckInSchema(Schema):
    registration_ids: list[UUID] = Field(..., min_length=1)


class CheckInResponseSchema(Schema):
    message: str
    checked_in: list[UUID]
    already_checked_in: list[UUID]
