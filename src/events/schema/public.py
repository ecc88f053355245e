"""Schemas of the unauthenticated endpoints."""

import typing as t

from ninja import Schema
from pydantic import EmailStr, Field, StringConstraints, model_validator

from common.schema import OneToHundredString, StrippedString

RequestMessage = t.Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=1000)]


class MembershipRequestSchema(Schema):
    """A prospective member asking to join an organization."""

    organization: StrippedString | None = Field(None, description="Organization slug or id.")
    web_url: StrippedString | None = Field(None, description="Public web address of the organization.")
    email: EmailStr
    first_name: OneToHundredString
    last_name: OneToHundredString
    phone: StrippedString = ""
    zip_code: StrippedString = ""
    message: RequestMessage

    @model_validator(mode="after")
    def organization_given(self) -> "MembershipRequestSchema":
        if not (self.organization or self.web_url):
            raise ValueError("Either organization or web_url is required.")
        return self

    @property
    def organization_identifier(self) -> str:
        return t.cast(str, self.organization or self.web_url)


class MembershipRequestResponseSchema(Schema):
    message: str
    organization_name: str


class PhoneValidationSchema(Schema):
    phone: StrippedString


class PhoneValidationResponseSchema(Schema):
    valid: bool
    formatted: str | None = None
    e164: str | None = None


class ZipCodeValidationSchema(Schema):
    zip_code: StrippedString


class ZipCodeValidationResponseSchema(Schema):
    valid: bool
    formatted: str | None = None
