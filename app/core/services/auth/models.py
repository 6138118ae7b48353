"""Authentication service database models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.database.connection import Base


class RoleModel(Base):
    """
    Database model for authorization roles.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique role identifier"
    )

    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        doc="Unique role name"
    )

    def __repr__(self) -> str:
        """String representation of role model."""
        return f"<RoleModel(id={self.id}, name='{self.name}')>"


class AccountModel(Base):
    """
    Database model for user accounts.

    Holds credentials, lockout state and the single active refresh token.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Unique account identifier"
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        doc="Account email address"
    )

    password_hash: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Bcrypt hashed password, empty for identity-provider accounts"
    )

    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id"),
        nullable=False,
        default=2,
        doc="Authorization role"
    )

    is_email_verified: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Whether the email address was confirmed"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        doc="Whether account is active"
    )

    failed_login_attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Consecutive failed password attempts"
    )

    locked_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="End of the current lockout window"
    )

    refresh_token: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        doc="The single currently valid refresh token"
    )

    provider: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        doc="Third-party identity provider"
    )

    provider_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Subject identifier at the identity provider"
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Last successful login timestamp"
    )

    email_verification_token: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        doc="Pending email verification token"
    )

    email_verification_expiry: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Email verification token expiry"
    )

    password_reset_token: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        doc="Pending password reset token"
    )

    password_reset_expiry: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Password reset token expiry"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        doc="Account creation timestamp"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        doc="Last account update timestamp"
    )

    def __repr__(self) -> str:
        """String representation of account model."""
        return f"<AccountModel(id={self.id}, email='{self.email}', role_id={self.role_id})>"
