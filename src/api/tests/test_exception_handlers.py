import typing as t
from unittest.mock import MagicMock

import orjson
from django.core.exceptions import ValidationError

from api.exception_handlers import (
    handle_django_validation_error,
    handle_domain_error,
    handle_general_exception,
    obfuscate,
)
from events.exceptions import CapacityExceededError, DuplicateRegistrationError, InvalidStateError, NotFoundError


def _request() -> MagicMock:
    request = MagicMock()
    request.method = "POST"
    request.path = "/api/members/invite"
    request.headers = {"Authorization": "Bearer abc", "Accept": "application/json"}
    request.GET.dict.return_value = {"token": "abc", "page": "2"}
    return request


def test_field_errors_are_grouped_by_field() -> None:
    exc = ValidationError({"reason": ["Too short."], "starts_at": ["In the past.", "Not a weekday."]})

    response = handle_django_validation_error(_request(), exc)

    assert response.status_code == 400
    assert orjson.loads(response.content) == {
        "errors": {"reason": ["Too short."], "starts_at": ["In the past.", "Not a weekday."]}
    }


def test_errors_without_a_field() -> None:
    response = handle_django_validation_error(_request(), ValidationError("Something is off."))

    assert orjson.loads(response.content) == {"errors": {"__all__": ["Something is off."]}}


def test_domain_errors_map_to_status_codes() -> None:
    cases = [
        (NotFoundError("Event not found."), 404),
        (InvalidStateError(), 400),
        (CapacityExceededError(), 409),
    ]
    for exc, status_code in cases:
        response = handle_domain_error(_request(), exc)
        assert response.status_code == status_code
        assert orjson.loads(response.content)["detail"] == exc.message


def test_domain_error_context_is_included() -> None:
    exc = DuplicateRegistrationError([{"type": "member", "id": "1", "name": "Ann"}])

    body = orjson.loads(handle_domain_error(_request(), exc).content)

    assert body == {
        "detail": "Some registrants are already registered for this event.",
        "registrants": [{"type": "member", "id": "1", "name": "Ann"}],
    }


def test_unexpected_errors_hide_details(settings: t.Any) -> None:
    settings.DEBUG = False

    response = handle_general_exception(_request(), RuntimeError("database password is hunter2"))

    assert response.status_code == 500
    assert orjson.loads(response.content) == {"detail": "Internal Server Error."}


def test_obfuscate() -> None:
    data = {"Authorization": "Bearer abc", "password": "secret", "page": "1"}

    assert obfuscate(data) == {"Authorization": "********", "password": "********", "page": "1"}
    assert data["password"] == "secret"
