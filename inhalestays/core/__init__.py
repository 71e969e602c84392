"""Core utilities and security modules."""

from inhalestays.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    InvalidBookingStatus,
    NotFoundError,
    RateLimitExceeded,
    SignatureMismatch,
    SlotNotAvailable,
    UnitNotBookable,
    ValidationError,
)
from inhalestays.core.security import create_access_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "InvalidBookingStatus",
    "NotFoundError",
    "RateLimitExceeded",
    "SignatureMismatch",
    "SlotNotAvailable",
    "UnitNotBookable",
    "ValidationError",
    "create_access_token",
    "verify_token",
]
