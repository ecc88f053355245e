import typing as t

from ninja_extra import ControllerBase, api_controller, route

from common.throttling import AuthThrottle
from events import schema
from events.service import invitation_service


@api_controller("/invites", tags=["Invites"], throttle=AuthThrottle())
class InviteController(ControllerBase):
    @route.post("/accept", url_name="accept_invite", response=schema.AcceptInviteResponseSchema)
    def accept(self, payload: schema.AcceptInviteSchema) -> dict[str, t.Any]:
        """Accept a membership invitation by choosing a password.

        The token comes from the invitation email. Once accepted, log in with your email
        and the new password.
        """
        profile = invitation_service.accept_invite(payload.token, payload.password)
        return {"message": "Invitation accepted. You can now log in.", "member": profile}
