"""Authentication exceptions."""

from datetime import datetime, timedelta
from typing import Optional

from app.core.exceptions import DomainException


class AuthenticationException(DomainException):
    """Base exception for authentication errors."""
    pass


class AuthorizationException(DomainException):
    """Base exception for authenticated callers lacking privileges."""
    pass


class InvalidCredentialsException(AuthenticationException):
    """Raised when login credentials are invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class AccountLockedException(AuthenticationException):
    """Raised while an account lockout window is active."""

    def __init__(
        self, locked_until: Optional[datetime] = None, duration: timedelta = timedelta(hours=24)
    ) -> None:
        hours = int(duration.total_seconds() // 3600)
        super().__init__(f"Your account has been blocked for {hours} hrs")
        self.locked_until = locked_until
        self.duration = duration


class NoPasswordSetException(AuthenticationException):
    """Raised when a provider-only account attempts password login."""

    def __init__(self) -> None:
        super().__init__("Please login with Google or reset your password.")


class TokenMissingException(AuthenticationException):
    """Raised when a request carries no token at all."""

    def __init__(self) -> None:
        super().__init__("Access denied, token missing")


class TokenMalformedException(AuthenticationException):
    """Raised when token is invalid or malformed."""

    def __init__(self, reason: str = "Invalid token") -> None:
        super().__init__(reason)


class TokenExpiredException(AuthenticationException):
    """Raised when token has expired."""

    def __init__(self) -> None:
        super().__init__("Token has expired")


class RefreshTokenInvalidException(AuthenticationException):
    """Raised when a refresh token is unknown, superseded or invalid."""

    def __init__(self, reason: str = "Invalid or expired refresh token") -> None:
        super().__init__(reason)


class EmailNotVerifiedException(AuthenticationException):
    """Raised when logging in before verifying the email address."""

    def __init__(self) -> None:
        super().__init__("Please verify your email before logging in")


class InactiveAccountException(AuthenticationException):
    """Raised when account is inactive."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"Account is inactive: {account_id}")
        self.account_id = account_id


class InsufficientRoleException(AuthorizationException):
    """Raised when an authenticated identity lacks the required role."""

    def __init__(self, required_role_id: int) -> None:
        super().__init__("Access denied, admin only")
        self.required_role_id = required_role_id


class AccountNotFoundException(DomainException):
    """Raised when account is not found."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Account not found: {identifier}")
        self.identifier = identifier


class AccountAlreadyExistsException(DomainException):
    """Raised when trying to create an account that already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Account already exists: {email}")
        self.email = email


class InvalidVerificationTokenException(DomainException):
    """Raised when an email verification or password reset token is unusable."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


class PasswordMismatchException(DomainException):
    """Raised when the current password given for a change is wrong."""

    def __init__(self) -> None:
        super().__init__("Current password is incorrect")


class PayloadCipherError(DomainException):
    """Base exception for token payload encryption errors."""
    pass


class PayloadFormatError(PayloadCipherError):
    """Raised when an encrypted payload string is not `<iv>:<ciphertext>`."""

    def __init__(self, reason: str = "Invalid encrypted data format") -> None:
        super().__init__(reason)


class PayloadDecryptionError(PayloadCipherError):
    """Raised when an encrypted payload cannot be authenticated or decoded."""

    def __init__(self, reason: str = "Unable to decrypt payload") -> None:
        super().__init__(reason)
