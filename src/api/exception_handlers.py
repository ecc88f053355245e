"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import DomainError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        method=request.method,
        path=request.path,
        headers=obfuscate(dict(request.headers)),
        query=obfuscate(request.GET.dict()),
    )
    data = {"detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Errors not bound to a field are reported under ``__all__``.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.info("VALIDATION_ERROR", path=request.path)
    assert isinstance(exc, ValidationError)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [m for e in v for m in e.messages] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": exc.messages}
    return Response(status=400, data={"errors": error_dict})


def handle_domain_error(request: HttpRequest, exc: DomainError | t.Type[DomainError]) -> Response:
    """Handle a domain error: its category decides the status code, its context is added to the body."""
    assert isinstance(exc, DomainError)
    logger.info(
        "DOMAIN_ERROR",
        error=exc.__class__.__name__,
        status_code=exc.status_code,
        detail=exc.message,
        path=request.path,
    )
    return Response(status=exc.status_code, data={"detail": exc.message, **exc.context})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
