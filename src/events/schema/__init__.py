from .event import CapacitySchema, EventCreateSchema, EventSchema, EventStatsSchema, EventUpdateSchema
from .family import FamilyMemberCreateSchema, FamilyMemberSchema, FamilyMemberUpdateSchema
from .member import (
    AcceptInviteResponseSchema,
    AcceptInviteSchema,
    MemberInactivateSchema,
    MemberInviteJWTPayloadSchema,
    MemberInviteResponseSchema,
    MemberInviteSchema,
    MemberProfileSchema,
    MemberProfileUpdateSchema,
    MembershipDecisionSchema,
    MemberStatsSchema,
    MemberUserSchema,
)
from .organization import MinimalOrganizationSchema, PublicOrganizationSchema
from .public import (
    MembershipRequestResponseSchema,
    MembershipRequestSchema,
    PhoneValidationResponseSchema,
    PhoneValidationSchema,
    ZipCodeValidationResponseSchema,
    ZipCodeValidationSchema,
)
from .registration import (
    CheckInResponseSchema,
    CheckInSchema,
    EventRegistrationsSchema,
    RegistrantInputSchema,
    RegistrationBatchResponseSchema,
    RegistrationCreateSchema,
    RegistrationSchema,
    RegistrationSummarySchema,
    RegistrationUpdateSchema,
)
from .report import DashboardSchema, ReportFilterSchema, ReportSchema, ReportType

__all__ = [
    # Event
    "CapacitySchema",
    "EventCreateSchema",
    "EventSchema",
    "EventStatsSchema",
    "EventUpdateSchema",
    # Family
    "FamilyMemberCreateSchema",
    "FamilyMemberSchema",
    "FamilyMemberUpdateSchema",
    # Member
    "AcceptInviteResponseSchema",
    "AcceptInviteSchema",
    "MemberInactivateSchema",
    "MemberInviteJWTPayloadSchema",
    "MemberInviteResponseSchema",
    "MemberInviteSchema",
    "MemberProfileSchema",
    "MemberProfileUpdateSchema",
    "MembershipDecisionSchema",
    "MemberStatsSchema",
    "MemberUserSchema",
    # Organization
    "MinimalOrganizationSchema",
    "PublicOrganizationSchema",
    # Public
    "MembershipRequestResponseSchema",
    "MembershipRequestSchema",
    "PhoneValidationResponseSchema",
    "PhoneValidationSchema",
    "ZipCodeValidationResponseSchema",
    "ZipCodeValidationSchema",
    # Registration
    "CheckInResponseSchema",
    "CheckInSchema",
    "EventRegistrationsSchema",
    "RegistrantInputSchema",
    "RegistrationBatchResponseSchema",
    "RegistrationCreateSchema",
    "RegistrationSchema",
    "RegistrationSummarySchema",
    "RegistrationUpdateSchema",
    # Report
    "DashboardSchema",
    "ReportFilterSchema",
    "ReportSchema",
    "ReportType",
]
