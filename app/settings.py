"""Application settings and configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application settings
    debug: bool = Field(False)
    environment: str = Field("development")
    host: str = Field("0.0.0.0")
    port: int = Field(8000)

    # Database settings
    database_url: str = Field("sqlite+aiosqlite:///./storefront.db")

    # Token settings
    cipher_secret: str = Field("default_32_characters_secret_key_!")
    access_token_secret: str = Field("access-secret-change-in-production")
    refresh_token_secret: str = Field("refresh-secret-change-in-production")
    jwt_algorithm: str = Field("HS256")
    access_token_expire_minutes: int = Field(15)
    refresh_token_expire_days: int = Field(7)

    # Cookie settings
    access_cookie_name: str = Field("accessToken")
    refresh_cookie_name: str = Field("refreshToken")

    # Account policy settings
    lockout_threshold: int = Field(3)
    lockout_duration_hours: int = Field(24)
    admin_role_id: int = Field(1)
    default_role_id: int = Field(2)
    email_verification_expire_minutes: int = Field(10)
    password_reset_expire_minutes: int = Field(10)

    # API settings
    api_title: str = Field("Storefront Auth API")
    api_version: str = Field("1.0.0")
    api_description: str = Field("Account registration, login and session management")

    # CORS settings
    allowed_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging settings
    log_level: str = Field("INFO")
    log_format: str = Field("json")
    log_dir: str = Field("logs")

    # Security settings
    bcrypt_rounds: int = Field(12)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def database_is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
