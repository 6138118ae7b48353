"""Authentication domain entities."""

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from app.core.domain.enums import SessionState, TokenStatus


@dataclass(frozen=True)
class Account:
    """
    Account entity for authentication.

    Attributes:
        id: Unique account identifier
        name: Display name
        email: Unique email address
        password_hash: Bcrypt hash, absent for identity-provider accounts
        role_id: Authorization role
        is_email_verified: Whether the email address was confirmed
        is_active: Whether account is active
        failed_login_attempts: Consecutive failed password attempts
        locked_until: End of the current lockout window
        refresh_token: The single currently valid refresh token
        provider: Third-party identity provider name
        provider_id: Subject identifier at the identity provider
        last_login_at: Last successful login timestamp
        email_verification_token: Pending email verification token
        email_verification_expiry: Expiry of the verification token
        password_reset_token: Pending password reset token
        password_reset_expiry: Expiry of the reset token
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    id: int
    name: str
    email: str
    password_hash: Optional[str] = None
    role_id: int = 2
    is_email_verified: bool = False
    is_active: bool = True
    failed_login_attempts: int = 0
    locked_until: Optional[datetime] = None
    refresh_token: Optional[str] = None
    provider: Optional[str] = None
    provider_id: Optional[str] = None
    last_login_at: Optional[datetime] = None
    email_verification_token: Optional[str] = None
    email_verification_expiry: Optional[datetime] = None
    password_reset_token: Optional[str] = None
    password_reset_expiry: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate account data after initialization."""
        if not self.email:
            raise ValueError("Email cannot be empty")
        if "@" not in self.email:
            raise ValueError("Invalid email format")
        if self.failed_login_attempts < 0:
            raise ValueError("Failed login attempts cannot be negative")

    @property
    def has_password(self) -> bool:
        """Check if account can authenticate with a password."""
        return bool(self.password_hash)

    def is_locked(self, now: datetime) -> bool:
        """Check if a lockout window is active at `now`."""
        return self.locked_until is not None and self.locked_until > now

    def holds_refresh_token(self, token: str) -> bool:
        """Check that `token` is the refresh token currently stored."""
        if not self.refresh_token or not token:
            return False
        return secrets.compare_digest(self.refresh_token, token)


@dataclass(frozen=True)
class Role:
    """Authorization role."""

    id: Optional[int]
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Role name cannot be empty")


@dataclass(frozen=True)
class TokenPayload:
    """
    Identity claims carried, encrypted, inside every signed token.

    Attributes:
        user_id: Account identifier
        role_id: Account role at issuance
    """

    user_id: int
    role_id: int

    def __post_init__(self) -> None:
        """Validate token payload data."""
        for field_name in ("user_id", "role_id"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{field_name} must be an integer")
            if value <= 0:
                raise ValueError(f"{field_name} must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TokenPayload":
        """
        Build a payload from decoded JSON, rejecting any other shape.

        Raises:
            ValueError: If keys are missing, unexpected or mistyped
        """
        if not isinstance(data, Mapping):
            raise ValueError("Token payload must be an object")
        if set(data.keys()) != {"user_id", "role_id"}:
            raise ValueError("Token payload has unexpected keys")
        return cls(user_id=data["user_id"], role_id=data["role_id"])

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "role_id": self.role_id}


@dataclass(frozen=True)
class TokenPair:
    """
    Access and refresh token pair.

    Attributes:
        access_token: Signed short-lived access token
        refresh_token: Signed long-lived refresh token
        token_type: Token type (typically "bearer")
        expires_in: Access token expiration time in seconds
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 900

    def __post_init__(self) -> None:
        """Validate token pair data."""
        if not self.access_token:
            raise ValueError("Access token cannot be empty")
        if not self.refresh_token:
            raise ValueError("Refresh token cannot be empty")


@dataclass(frozen=True)
class TokenVerification:
    """
    Result of verifying a signed token.

    `payload` is set only when `status` is VALID.
    """

    status: TokenStatus
    payload: Optional[TokenPayload] = None
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.status == TokenStatus.VALID) != (self.payload is not None):
            raise ValueError("Only valid verifications carry a payload")

    @classmethod
    def valid(cls, payload: TokenPayload) -> "TokenVerification":
        return cls(TokenStatus.VALID, payload)

    @classmethod
    def expired(cls) -> "TokenVerification":
        return cls(TokenStatus.EXPIRED, reason="Token has expired")

    @classmethod
    def malformed(cls, reason: str) -> "TokenVerification":
        return cls(TokenStatus.MALFORMED, reason=reason)

    @property
    def is_valid(self) -> bool:
        return self.status == TokenStatus.VALID


@dataclass(frozen=True)
class SessionResult:
    """
    Resolved identity for an authenticated request.

    Attributes:
        state: Terminal state the resolution ended in
        identity: Decrypted identity claims
        access_token: Freshly issued access token when the session was refreshed
    """

    state: SessionState
    identity: TokenPayload
    access_token: Optional[str] = None

    @property
    def refreshed(self) -> bool:
        return self.access_token is not None
