from django.http import HttpRequest
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from events.service import policy
from events.service.policy import Capability


class RootPermission(BasePermission):
    def __init__(self, capability: Capability) -> None:
        """Store the capability."""
        self.capability = capability


class HasCapability(RootPermission):
    """Route-level check against the role capability table.

    Services check the same capability again, so this only fails requests early.
    """

    message = "You do not have permission to perform this action."

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        """The caller's role must grant the capability."""
        return policy.allows(request.user, self.capability)  # type: ignore[arg-type]
