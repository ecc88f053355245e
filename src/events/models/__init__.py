from .audit import AuditLog
from .event import Event
from .member import FamilyMember, MemberProfile
from .organization import Organization
from .registration import RegistrantKind, RegistrantRef, Registration

__all__ = [
    "AuditLog",
    "Event",
    "FamilyMember",
    "MemberProfile",
    "Organization",
    "RegistrantKind",
    "RegistrantRef",
    "Registration",
]
