"""Domain errors.

Each class maps to one stable error category of the API (see ``api.exception_handlers``).
Input validation failures are raised as Django ``ValidationError`` instead.
"""

import typing as t


class DomainError(Exception):
    """Base class for errors caused by the caller's request."""

    status_code: t.ClassVar[int] = 400
    default_message: t.ClassVar[str] = "The request could not be processed."

    def __init__(self, message: str | None = None, **context: t.Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Raised when an entity does not exist or lives in another organization."""

    status_code = 404
    default_message = "Not found."


class PermissionDeniedError(DomainError):
    """Raised when the caller's role or ownership does not allow the operation."""

    status_code = 403
    default_message = "You do not have permission to perform this action."


class InvalidStateError(DomainError):
    """Raised when an operation is not valid for the current lifecycle state."""

    status_code = 400
    default_message = "This operation is not allowed in the current state."


class ConflictError(DomainError):
    """Raised when the request collides with existing data."""

    status_code = 409
    default_message = "The request conflicts with existing data."


class DuplicateRegistrationError(ConflictError):
    """Raised when registrants already hold an active registration for the event."""

    default_message = "Some registrants are already registered for this event."

    def __init__(self, registrants: list[dict[str, str]], message: str | None = None) -> None:
        super().__init__(message, registrants=registrants)
        self.registrants = registrants


class DuplicateMemberError(ConflictError):
    """Raised when an email already has a membership record in the organization."""

    default_message = "A membership record already exists for this email."


class CapacityExceededError(ConflictError):
    """Raised when neither the capacity nor the waitlist can take the batch."""

    default_message = "Event is at capacity and waitlist is full."
