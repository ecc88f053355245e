"""Registration and capacity management package.

This package decides the status of registration batches and serializes every
capacity-affecting write per event.
"""

from .decision import decide_status
from .manager import RegistrationManager
from .types import (
    CapacitySnapshot,
    CheckInResult,
    EventRegistrations,
    RegistrationEntry,
    RegistrationSummary,
)

__all__ = [
    "CapacitySnapshot",
    "CheckInResult",
    "EventRegistrations",
    "RegistrationEntry",
    "RegistrationManager",
    "RegistrationSummary",
    "decide_status",
]
