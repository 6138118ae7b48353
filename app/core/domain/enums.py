"""Domain enums for the storefront service."""

from enum import Enum


class TokenStatus(str, Enum):
    """Outcome of verifying a signed token."""

    VALID = "valid"
    EXPIRED = "expired"
    MALFORMED = "malformed"


class TokenKind(str, Enum):
    """Signed token kinds issued by the service."""

    ACCESS = "access"
    REFRESH = "refresh"


class SessionState(str, Enum):
    """States of the per-request session resolution."""

    NO_TOKEN = "no_token"
    ACCESS_VALID = "access_valid"
    ACCESS_EXPIRED_REFRESH_VALID = "access_expired_refresh_valid"
    ACCESS_EXPIRED_REFRESH_INVALID = "access_expired_refresh_invalid"
    UNAUTHENTICATED = "unauthenticated"
