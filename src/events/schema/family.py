import datetime
from uuid import UUID

from ninja import ModelSchema, Schema

from common.schema import OneToHundredString, StrippedString
from events.models import FamilyMember


class FamilyMemberSchema(ModelSchema):
    member_id: UUID

    class Meta:
        model = FamilyMember
        fields = [
            "id",
            "first_name",
            "last_name",
            "date_of_birth",
            "relationship",
            "gender",
            "allergies",
            "notes",
            "is_active",
            "created_at",
        ]


class FamilyMemberCreateSchema(Schema):
    first_name: OneToHundredString
    last_name: OneToHundredString
    date_of_birth: datetime.date | None = None
    relationship: FamilyMember.Relationship = FamilyMember.Relationship.OTHER
    gender: StrippedString = ""
    allergies: StrippedString = ""
    notes: StrippedString = ""


class FamilyMemberUpdateSchema(Schema):
    first_name: OneToHundredString | None = None
    last_name: OneToHundredString | None = None
    date_of_birth: datetime.date | None = None
    relationship: FamilyMember.Relationship | None = None
    gender: StrippedString | None = None
    allergies: StrippedString | None = None
    notes: StrippedString | None = None
