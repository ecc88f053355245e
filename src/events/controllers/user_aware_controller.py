import typing as t

from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import KinshipUser


class UserAwareController(ControllerBase):
    def maybe_user(self) -> KinshipUser | AnonymousUser:
        """Get the user for this request."""
        return t.cast(KinshipUser | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> KinshipUser:
        """Get the user for this request."""
        return t.cast(KinshipUser, self.context.request.user)  # type: ignore[union-attr]
