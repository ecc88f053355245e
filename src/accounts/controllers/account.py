"""This module contains the account and user administration controllers."""

from uuid import UUID

from ninja_extra import api_controller, route

from accounts import schema
from accounts.models import KinshipUser
from accounts.service import auth as auth_service
from common.authentication import ContextJWTAuth
from common.throttling import WriteThrottle
from events.controllers.permissions import HasCapability
from events.controllers.user_aware_controller import UserAwareController
from events.service.policy import Capability


@api_controller("/account", auth=ContextJWTAuth(), tags=["Account"])
class AccountController(UserAwareController):
    @route.get("/me", url_name="me", response=schema.KinshipUserSchema)
    def me(self) -> KinshipUser:
        """Get the authenticated user's account, role and organization."""
        return self.user()


@api_controller(
    "/users",
    auth=ContextJWTAuth(),
    tags=["Users"],
    permissions=[HasCapability(Capability.MANAGE_USERS)],
)
class UserAdminController(UserAwareController):
    @route.post(
        "/",
        url_name="create_staff_user",
        response={201: schema.KinshipUserSchema},
        throttle=WriteThrottle(),
    )
    def create_staff_user(self, payload: schema.StaffUserCreateSchema) -> tuple[int, KinshipUser]:
        """Create an administrator or event staff account in your organization."""
        return 201, auth_service.create_staff_user(self.user(), payload)

    @route.patch("/{user_id}/role", url_name="update_user_role", response=schema.KinshipUserSchema)
    def update_role(self, user_id: UUID, payload: schema.RoleUpdateSchema) -> KinshipUser:
        """Change the role of an account in your organization."""
        return auth_service.update_user_role(self.user(), user_id, payload.role)
