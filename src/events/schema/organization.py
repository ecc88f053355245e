"""Organization-related schemas."""

from uuid import UUID

from ninja import Schema


class MinimalOrganizationSchema(Schema):
    id: UUID
    name: str
    slug: str


class PublicOrganizationSchema(MinimalOrganizationSchema):
    """What anonymous visitors of the registration form may see."""

    web_url: str | None = None
    description: str = ""
    contact_email: str = ""
