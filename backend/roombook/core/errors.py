"""Booking error taxonomy.

Every error carries a stable ``code`` so clients can branch on it without
parsing the message. None of these are retried internally.
"""

from __future__ import annotations

from typing import Any, Optional


class BookingError(Exception):
    """Base error raised by the booking core."""

    status_code: int = 400
    default_code: str = "booking_error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class ValidationError(BookingError):
    """Malformed or rule-violating request. Always caller-fixable."""

    status_code = 422
    default_code = "validation_error"


class ConflictError(BookingError):
    """Slot already consumed by an approved booking."""

    status_code = 409
    default_code = "slot_conflict"


class StateError(BookingError):
    """Operation illegal for the record's current status."""

    status_code = 409
    default_code = "invalid_state"


class NotFoundError(BookingError):
    status_code = 404
    default_code = "not_found"


class AuthorizationError(BookingError):
    """Actor neither owns the record nor is an admin."""

    status_code = 403
    default_code = "forbidden"
