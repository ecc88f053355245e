"""Role capabilities.

This table is the only place that says which role may do what. Services call
``require`` once, before any business logic; ownership rules (a member acting on
their own profile or family) are checked by the services themselves.
"""

from enum import StrEnum

import structlog
from django.contrib.auth.models import AnonymousUser

from accounts.models import KinshipUser
from events.exceptions import PermissionDeniedError

logger = structlog.get_logger(__name__)

Role = KinshipUser.Role


class Capability(StrEnum):
    MANAGE_MEMBERS = "manage_members"
    VIEW_MEMBERS = "view_members"
    MANAGE_USERS = "manage_users"
    MANAGE_EVENTS = "manage_events"
    VIEW_EVENTS = "view_events"
    VIEW_EVENT_STATS = "view_event_stats"
    REGISTER = "register"
    REGISTER_ANYONE = "register_anyone"
    MANAGE_REGISTRATIONS = "manage_registrations"
    VIEW_REGISTRATIONS = "view_registrations"
    CHECK_IN = "check_in"
    VIEW_REPORTS = "view_reports"
    MANAGE_FAMILY = "manage_family"
    MANAGE_ANY_FAMILY = "manage_any_family"


CAPABILITIES: dict[str, frozenset[Capability]] = {
    Role.ORG_ADMIN.value: frozenset(Capability),
    Role.EVENT_STAFF.value: frozenset(
        {
            Capability.VIEW_MEMBERS,
            Capability.VIEW_EVENTS,
            Capability.VIEW_EVENT_STATS,
            Capability.VIEW_REGISTRATIONS,
            Capability.CHECK_IN,
            Capability.VIEW_REPORTS,
        }
    ),
    Role.MEMBER.value: frozenset(
        {
            Capability.VIEW_EVENTS,
            Capability.REGISTER,
            Capability.MANAGE_FAMILY,
        }
    ),
}


def allows(user: KinshipUser | AnonymousUser, capability: Capability) -> bool:
    """Whether the user's role grants the capability within their organization."""
    if not user.is_authenticated or not user.is_active:
        return False
    if getattr(user, "organization_id", None) is None:
        return False
    return capability in CAPABILITIES.get(str(user.role), frozenset())


def require(user: KinshipUser | AnonymousUser, capability: Capability) -> None:
    """Raise PermissionDeniedError unless the user holds the capability."""
    if not allows(user, capability):
        logger.warning(
            "capability_denied",
            user_id=str(getattr(user, "id", "")),
            role=getattr(user, "role", None),
            capability=str(capability),
        )
        raise PermissionDeniedError()

