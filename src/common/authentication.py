import typing as t

import structlog
from django.http import HttpRequest
from ninja_jwt.authentication import JWTAuth


class ContextJWTAuth(JWTAuth):
    """JWT authentication that binds the caller to the structlog context.

    Once the bearer token is validated, the user id, role and organization are
    bound so every log event emitted by the request carries the caller identity.

    Usage:
        @api_controller("/members", auth=ContextJWTAuth())
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and bind the caller identity."""
        user = super().authenticate(request, token)
        if user is not None:
            structlog.contextvars.bind_contextvars(
                user_id=str(user.id),
                role=getattr(user, "role", None),
                organization_id=str(user.organization_id) if getattr(user, "organization_id", None) else None,
            )
        return user
