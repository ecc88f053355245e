"""This module contains the controllers for the authentication app."""

from ninja_extra import api_controller, route
from ninja_jwt.controller import TokenObtainPairController
from ninja_jwt.schema import TokenObtainPairOutputSchema

from accounts import schema
from accounts.service import auth as auth_service
from common.throttling import AuthThrottle


@api_controller("/auth", tags=["Auth"], throttle=AuthThrottle())
class AuthController(TokenObtainPairController):
    @route.post("/token/pair", response=TokenObtainPairOutputSchema, url_name="token_obtain_pair")
    def obtain_token(self, payload: schema.LoginSchema) -> TokenObtainPairOutputSchema:  # type: ignore[override]
        """Authenticate with email and password to obtain JWT access/refresh tokens.

        The same email may belong to accounts of several organizations; pass the
        organization's slug in that case. Accounts that are invited, pending approval
        or deactivated cannot log in.
        """
        return auth_service.login(payload.email, payload.password, payload.organization)
