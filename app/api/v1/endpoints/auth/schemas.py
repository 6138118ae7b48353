"""Authentication API schemas."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, EmailStr


class AccountRegistrationRequest(BaseModel):
    """Account registration request schema."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name",
        examples=["Jane Doe"],
    )
    email: EmailStr = Field(
        ...,
        description="Account email address",
        examples=["jane.doe@example.com"],
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (8-128 characters)",
        examples=["secure_password_123"],
    )


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="Account email address",
        examples=["jane.doe@example.com"],
    )
    password: str = Field(
        ...,
        description="Password",
        examples=["secure_password_123"],
    )


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str = Field(
        ...,
        description="JWT access token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."],
    )
    refresh_token: str = Field(
        ...,
        description="JWT refresh token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."],
    )
    token_type: str = Field(
        default="bearer",
        description="Token type",
        examples=["bearer"],
    )
    expires_in: int = Field(
        ...,
        description="Access token expiration time in seconds",
        examples=[900],
    )


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema; the cookie is used when omitted."""

    refresh_token: Optional[str] = Field(
        None,
        description="Refresh token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."],
    )


class VerifyEmailRequest(BaseModel):
    """Email verification request schema."""

    token: str = Field(
        ...,
        min_length=1,
        description="Verification token sent to the account email",
        examples=["9f86d081884c7d659a2feaa0c55ad015a3bf4f1b"],
    )


class ChangePasswordRequest(BaseModel):
    """Change password request schema."""

    current_password: str = Field(..., description="Current password")
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (8-128 characters)",
    )


class ForgotPasswordRequest(BaseModel):
    """Password reset token request schema."""

    email: EmailStr = Field(
        ...,
        description="Account email address",
        examples=["jane.doe@example.com"],
    )


class ResetPasswordRequest(BaseModel):
    """Password reset request schema."""

    token: str = Field(..., min_length=1, description="Password reset token")
    new_password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (8-128 characters)",
    )


class ResetTokenResponse(BaseModel):
    """Password reset token response schema."""

    message: str = Field(..., examples=["Password reset token generated"])
    reset_token: str = Field(..., description="One-time password reset token")


class MessageResponse(BaseModel):
    """Plain message response schema."""

    message: str = Field(..., examples=["Logged out successfully"])


class AccountResponse(BaseModel):
    """Account response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Account unique identifier", examples=[1])
    name: str = Field(..., description="Display name", examples=["Jane Doe"])
    email: str = Field(
        ...,
        description="Account email address",
        examples=["jane.doe@example.com"],
    )
    role_id: int = Field(..., description="Role identifier", examples=[2])
    is_email_verified: bool = Field(
        ...,
        description="Whether the email address is verified",
        examples=[True],
    )
    is_active: bool = Field(
        ...,
        description="Whether account is active",
        examples=[True],
    )
    last_login_at: Optional[datetime] = Field(
        None,
        description="Last successful login timestamp",
    )
    created_at: Optional[datetime] = Field(
        None,
        description="Account creation timestamp",
        examples=["2024-01-01T12:00:00Z"],
    )


class RegistrationResponse(AccountResponse):
    """Registration response schema."""

    verification_token: Optional[str] = Field(
        None,
        description="Email verification token",
    )


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(
        ...,
        description="Error message",
        examples=["Invalid credentials"],
    )
    type: str = Field(
        ...,
        description="Error type",
        examples=["AuthenticationError"],
    )
