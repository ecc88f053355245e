"""Member-related schemas."""

import datetime
import typing as t
from uuid import UUID, uuid4

from django.conf import settings
from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field, StringConstraints, field_serializer, model_validator

from accounts.models import KinshipUser
from common.schema import OneToHundredString, StrippedString
from events.models import MemberProfile

ReasonString = t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=500)]
MessageString = t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]


class MemberUserSchema(ModelSchema):
    class Meta:
        model = KinshipUser
        fields = ["id", "email", "first_name", "last_name", "role", "is_active", "email_verified"]


class MemberProfileSchema(ModelSchema):
    user: MemberUserSchema
    organization_id: UUID

    class Meta:
        model = MemberProfile
        fields = [
            "id",
            "membership_status",
            "phone",
            "zip_code",
            "address",
            "date_of_birth",
            "gender",
            "emergency_contact_name",
            "emergency_contact_phone",
            "allergies",
            "notes",
            "invited_at",
            "registration_requested_at",
            "registration_message",
            "approved_at",
            "denied_at",
            "denial_reason",
            "activated_at",
            "inactivated_at",
            "inactivated_reason",
            "created_at",
        ]


class MemberProfileUpdateSchema(Schema):
    first_name: OneToHundredString | None = None
    last_name: OneToHundredString | None = None
    phone: StrippedString | None = None
    zip_code: StrippedString | None = None
    address: StrippedString | None = None
    date_of_birth: datetime.date | None = None
    gender: StrippedString | None = None
    emergency_contact_name: StrippedString | None = None
    emergency_contact_phone: StrippedString | None = None
    allergies: StrippedString | None = None
    notes: StrippedString | None = None


class MemberInviteSchema(Schema):
    email: EmailStr
    first_name: OneToHundredString | None = None
    last_name: OneToHundredString | None = None


class MemberInviteResponseSchema(Schema):
    message: str
    member: MemberProfileSchema


class MembershipDecisionSchema(Schema):
    approve: bool
    message: MessageString = ""
    denial_reason: ReasonString = ""


class MemberInactivateSchema(Schema):
    reason: ReasonString = Field(..., description="Why the membership is being deactivated (5-500 characters).")


class MemberStatsSchema(Schema):
    total_members: int
    active_members: int
    inactive_members: int
    invited_members: int
    pending_members: int
    total_family_members: int
    total_people: int


class MemberInviteJWTPayloadSchema(Schema):
    """JWT payload of a member invitation link."""

    type: t.Literal["member_invite"]
    organization_id: UUID4
    user_id: UUID4
    member_id: UUID4
    email: EmailStr
    exp: datetime.datetime
    jti: str = Field(default_factory=lambda: str(uuid4()))
    aud: str = Field(default_factory=lambda: settings.JWT_AUDIENCE)

    @field_serializer("exp")
    def serialize_exp(self, value: datetime.datetime) -> int:
        return int(value.timestamp())


class AcceptInviteSchema(Schema):
    token: str
    password: str = Field(..., min_length=8, max_length=128)
    password_confirmation: str | None = None

    @model_validator(mode="after")
    def passwords_match(self) -> "AcceptInviteSchema":
        """Check the confirmation when it is sent."""
        if self.password_confirmation is not None and self.password_confirmation != self.password:
            raise ValueError("Passwords do not match.")
        return self


class AcceptInviteResponseSchema(Schema):
    message: str
    member: MemberProfileSchema
