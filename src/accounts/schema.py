"""Schema for accounts module."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import UUID4, EmailStr, Field

from common.schema import OneToHundredString, StrippedString

from .models import KinshipUser


class KinshipUserSchema(ModelSchema):
    id: UUID4
    organization_id: UUID | None = None
    display_name: str

    class Meta:
        model = KinshipUser
        fields = ["email", "first_name", "last_name", "role", "is_active", "email_verified"]


class LoginSchema(Schema):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=150)
    organization: StrippedString | None = Field(
        None, description="Organization slug, web address or id. Needed when the email exists in several."
    )


class StaffUserCreateSchema(Schema):
    email: EmailStr
    first_name: OneToHundredString
    last_name: OneToHundredString
    role: KinshipUser.Role = KinshipUser.Role.EVENT_STAFF
    password: str = Field(..., min_length=8, max_length=150)


class RoleUpdateSchema(Schema):
    role: KinshipUser.Role


class TokenClaims(Schema):
    """Extra claims carried by access and refresh tokens."""

    organization_id: str | None
    role: str
    email: str
    type: t.Literal["session"] = "session"
