from uuid import UUID

from ninja_extra import api_controller, route

from common.authentication import ContextJWTAuth
from events import models, schema
from events.service import family_service
from events.service.policy import Capability

from .permissions import HasCapability
from .user_aware_controller import UserAwareController


@api_controller(
    "/family-members",
    auth=ContextJWTAuth(),
    tags=["Family"],
    permissions=[HasCapability(Capability.MANAGE_FAMILY)],
)
class FamilyMemberController(UserAwareController):
    @route.patch("/{family_member_id}", url_name="update_family_member", response=schema.FamilyMemberSchema)
    def update_family_member(
        self, family_member_id: UUID, payload: schema.FamilyMemberUpdateSchema
    ) -> models.FamilyMember:
        """Update one of your family members."""
        return family_service.update_family_member(self.user(), family_member_id, payload)

    @route.delete("/{family_member_id}", url_name="remove_family_member", response={204: None})
    def remove_family_member(self, family_member_id: UUID) -> tuple[int, None]:
        """Remove a family member. Their past registrations are kept."""
        family_service.remove_family_member(self.user(), family_member_id)
        return 204, None
