"""Authentication core configuration."""

from dataclasses import dataclass
from datetime import timedelta

from app.settings import Settings


@dataclass(frozen=True)
class AuthConfig:
    """
    Secrets and policy values consumed by the authentication core.

    Built once from settings at startup and handed to each component, so tests
    can construct one with fixed keys.
    """

    cipher_secret: str
    access_token_secret: str
    refresh_token_secret: str
    jwt_algorithm: str = "HS256"
    access_token_ttl: timedelta = timedelta(minutes=15)
    refresh_token_ttl: timedelta = timedelta(days=7)
    lockout_threshold: int = 3
    lockout_duration: timedelta = timedelta(hours=24)
    admin_role_id: int = 1
    default_role_id: int = 2
    email_verification_ttl: timedelta = timedelta(minutes=10)
    password_reset_ttl: timedelta = timedelta(minutes=10)

    def __post_init__(self) -> None:
        if not self.cipher_secret:
            raise ValueError("Cipher secret cannot be empty")
        if not self.access_token_secret or not self.refresh_token_secret:
            raise ValueError("Token signing secrets cannot be empty")
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("Access and refresh secrets must differ")
        if self.lockout_threshold < 1:
            raise ValueError("Lockout threshold must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthConfig":
        return cls(
            cipher_secret=settings.cipher_secret,
            access_token_secret=settings.access_token_secret,
            refresh_token_secret=settings.refresh_token_secret,
            jwt_algorithm=settings.jwt_algorithm,
            access_token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_ttl=timedelta(days=settings.refresh_token_expire_days),
            lockout_threshold=settings.lockout_threshold,
            lockout_duration=timedelta(hours=settings.lockout_duration_hours),
            admin_role_id=settings.admin_role_id,
            default_role_id=settings.default_role_id,
            email_verification_ttl=timedelta(
                minutes=settings.email_verification_expire_minutes
            ),
            password_reset_ttl=timedelta(minutes=settings.password_reset_expire_minutes),
        )
