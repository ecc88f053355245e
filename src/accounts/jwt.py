"""The JWT module.

Signed, short-lived tokens for flows that happen outside an authenticated
session (for example accepting an invitation). Session tokens are issued by
ninja_jwt; see ``accounts.service.auth``.
"""

import typing as t

import jwt
import structlog
from django.conf import settings
from ninja_extra.exceptions import AuthenticationFailed
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger(__name__)

T = t.TypeVar("T", bound=BaseModel)


def create_token(payload: dict[str, t.Any], secret: str, algorithm: str) -> str:
    """Helper function to create a JWT token.

    Args:
        payload (dict): The payload.
        secret (str): The secret key.
        algorithm (str): The algorithm.

    Returns:
        str: The JWT token.
    """
    return jwt.encode(payload, secret, algorithm=algorithm)


def token_to_payload(
    token: str,
    schema_class: t.Type[T],
    error_message: str = "Invalid or expired token.",
) -> T:
    """Decode a token and validate it against a schema.

    The schema's literal ``type`` field makes a token of one kind unusable for another.

    Args:
        token (str): The token to decode.
        schema_class (t.Type[BaseModel]): The schema to validate the token against.
        error_message (str): Message of the AuthenticationFailed raised on any failure.

    Returns:
        BaseModel: The decoded and validated token.

    Raises:
        AuthenticationFailed: If the token is expired, tampered with or of the wrong type.
    """
    try:
        _payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM], audience=settings.JWT_AUDIENCE
        )
        return schema_class.model_validate(_payload)
    except jwt.ExpiredSignatureError as e:
        logger.warning("token_validation_expired", token_type=schema_class.__name__)
        raise AuthenticationFailed(error_message) from e
    except (jwt.InvalidTokenError, ValidationError) as e:
        logger.warning("token_validation_failed", token_type=schema_class.__name__, error=str(e))
        raise AuthenticationFailed(error_message) from e
