from .config import BookingRules, settings
from .errors import (
    AuthorizationError,
    BookingError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from .security import create_token, verify_token

__all__ = [
    "settings",
    "BookingRules",
    "BookingError",
    "ValidationError",
    "ConflictError",
    "StateError",
    "NotFoundError",
    "AuthorizationError",
    "create_token",
    "verify_token",
]
