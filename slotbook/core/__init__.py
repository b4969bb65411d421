"""Core utilities and security modules."""

from slotbook.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidBookingStatus,
    NotFoundError,
    ResourceBusy,
    ResourceNotAvailable,
    ValidationError,
)
from slotbook.core.security import create_access_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InvalidBookingStatus",
    "NotFoundError",
    "ResourceBusy",
    "ResourceNotAvailable",
    "ValidationError",
    "create_access_token",
    "verify_token",
]
