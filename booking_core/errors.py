"""
Typed failures raised by the scheduling core.

The core never logs-and-swallows. Each error carries a stable ``code``,
an HTTP-equivalent ``status_code`` and a ``retryable`` flag so the
operations layer can map it to a transport response without inspecting
messages.
"""

from typing import Any, Optional

from pydantic import ValidationError


class SchedulingError(Exception):
    """Base exception for all scheduling-domain errors."""

    status_code: int = 500
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


class InvalidRequestError(SchedulingError):
    """Malformed or missing input. Never retried automatically."""

    status_code = 400


class InvalidArgumentError(InvalidRequestError):
    """A caller passed an argument outside the accepted domain."""


class NotFoundError(SchedulingError):
    """Unknown provider, service, booking or review."""

    status_code = 404


class SlotUnavailableError(SchedulingError):
    """The requested slot is no longer free. Refresh availability and retry."""

    status_code = 409
    retryable = True


class ServiceUnavailableError(SchedulingError):
    """The service is disabled and cannot be booked."""

    status_code = 409


class InvalidTransitionError(SchedulingError):
    """Raised when a booking status change is not allowed from its current status."""

    status_code = 409


class DuplicateReviewError(SchedulingError):
    """The booking already has a review."""

    status_code = 409


class BookingNotCompletedError(SchedulingError):
    """Reviews are only accepted for completed bookings."""

    status_code = 409


class LockTimeoutError(SchedulingError):
    """The per-key lock could not be acquired in time. Safe to retry."""

    status_code = 503
    retryable = True


def from_validation_error(exc: ValidationError) -> InvalidRequestError:
    """Convert a pydantic payload validation failure into an InvalidRequestError."""
    fields = [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]
    names = ", ".join(f["field"] for f in fields) or "payload"
    return InvalidRequestError(f"Invalid request fields: {names}.", details={"errors": fields})
