"""Tests for authentication services."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from app.core.auth.entities import Account, TokenPayload
from app.core.auth.exceptions import (
    AccountAlreadyExistsException,
    AccountLockedException,
    AccountNotFoundException,
    EmailNotVerifiedException,
    InactiveAccountException,
    InvalidCredentialsException,
    InvalidVerificationTokenException,
    NoPasswordSetException,
    PasswordMismatchException,
    RefreshTokenInvalidException,
)
from app.core.auth.lockout import CredentialVerifier, LockoutPolicy
from app.core.auth.services import AuthenticationService


@pytest.fixture
def mock_account(password_service):
    """Create verified account whose password is `password123`."""
    return Account(
        id=1,
        name="Jane",
        email="jane@example.com",
        password_hash=password_service.hash_password("password123"),
        is_email_verified=True,
    )


@pytest.fixture
def mock_account_repository():
    """Create mock account repository."""
    return AsyncMock()


@pytest.fixture
def auth_service(mock_account_repository, password_service, token_service, auth_config):
    """Create authentication service with mocked repository."""
    verifier = CredentialVerifier(
        mock_account_repository, password_service, LockoutPolicy(auth_config)
    )
    return AuthenticationService(
        mock_account_repository,
        password_service,
        token_service,
        verifier,
        auth_config,
    )


class TestPasswordService:
    """Test cases for PasswordService."""

    def test_hash_password(self, password_service):
        hashed = password_service.hash_password("test_password_123")

        assert hashed != "test_password_123"
        assert hashed.startswith("$2b$")

    def test_verify_password(self, password_service):
        hashed = password_service.hash_password("test_password_123")

        assert password_service.verify_password("test_password_123", hashed) is True
        assert password_service.verify_password("wrong_password", hashed) is False

    def test_hash_password_different_results(self, password_service):
        assert password_service.hash_password("same") != password_service.hash_password("same")


class TestRegistration:
    """Test cases for account registration."""

    @pytest.mark.asyncio
    async def test_register_account(self, auth_service, mock_account_repository):
        mock_account_repository.get_account_by_email.return_value = None
        mock_account_repository.create_account.side_effect = lambda account: replace(
            account, id=10
        )

        account = await auth_service.register_account(
            "Jane", "jane@example.com", "password123"
        )

        assert account.id == 10
        assert account.role_id == 2
        assert account.is_email_verified is False
        assert account.password_hash != "password123"
        assert account.email_verification_token is not None
        assert account.email_verification_expiry > datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_register_existing_email(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_email.return_value = mock_account

        with pytest.raises(AccountAlreadyExistsException):
            await auth_service.register_account("Jane", "jane@example.com", "password123")

        mock_account_repository.create_account.assert_not_called()


class TestAuthenticate:
    """Test cases for login."""

    @pytest.mark.asyncio
    async def test_authenticate_success(
        self, auth_service, mock_account_repository, mock_account, token_service
    ):
        mock_account_repository.get_account_by_email.return_value = mock_account

        token_pair = await auth_service.authenticate("jane@example.com", "password123")

        identity = token_service.verify_access_token(token_pair.access_token).payload
        assert identity == TokenPayload(user_id=1, role_id=2)

        kwargs = mock_account_repository.update_account.await_args.kwargs
        assert kwargs["refresh_token"] == token_pair.refresh_token
        assert kwargs["failed_login_attempts"] == 0
        assert kwargs["last_login_at"] is not None

    @pytest.mark.asyncio
    async def test_unknown_email(self, auth_service, mock_account_repository):
        mock_account_repository.get_account_by_email.return_value = None

        with pytest.raises(InvalidCredentialsException) as exc_info:
            await auth_service.authenticate("nobody@example.com", "password123")

        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service, mock_account_repository, mock_account):
        mock_account_repository.get_account_by_email.return_value = mock_account

        with pytest.raises(InvalidCredentialsException) as exc_info:
            await auth_service.authenticate("jane@example.com", "wrong")

        assert exc_info.value.message == "Invalid credentials"
        mock_account_repository.update_account.assert_awaited_once_with(
            1, failed_login_attempts=1
        )

    @pytest.mark.asyncio
    async def test_third_wrong_password_locks(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_email.return_value = replace(
            mock_account, failed_login_attempts=2
        )

        with pytest.raises(AccountLockedException) as exc_info:
            await auth_service.authenticate("jane@example.com", "wrong")

        assert exc_info.value.message == "Your account has been blocked for 24 hrs"

    @pytest.mark.asyncio
    async def test_locked_account_correct_password(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_email.return_value = replace(
            mock_account, locked_until=datetime.now(timezone.utc) + timedelta(hours=1)
        )

        with pytest.raises(AccountLockedException):
            await auth_service.authenticate("jane@example.com", "password123")

    @pytest.mark.asyncio
    async def test_provider_account(self, auth_service, mock_account_repository, mock_account):
        mock_account_repository.get_account_by_email.return_value = replace(
            mock_account, password_hash=None, provider="google"
        )

        with pytest.raises(NoPasswordSetException):
            await auth_service.authenticate("jane@example.com", "password123")

    @pytest.mark.asyncio
    async def test_inactive_account(self, auth_service, mock_account_repository, mock_account):
        mock_account_repository.get_account_by_email.return_value = replace(
            mock_account, is_active=False
        )

        with pytest.raises(InactiveAccountException):
            await auth_service.authenticate("jane@example.com", "password123")

    @pytest.mark.asyncio
    async def test_unverified_account_gets_new_token(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_email.return_value = replace(
            mock_account, is_email_verified=False
        )

        with pytest.raises(EmailNotVerifiedException):
            await auth_service.authenticate("jane@example.com", "password123")

        kwargs = mock_account_repository.update_account.await_args.kwargs
        assert kwargs["email_verification_token"]
        assert "refresh_token" not in kwargs


class TestRefreshTokenRotation:
    """Test cases for refresh token rotation."""

    @pytest.mark.asyncio
    async def test_rotate(self, auth_service, mock_account_repository, mock_account, token_service):
        old_pair = token_service.issue(TokenPayload(user_id=1, role_id=2))
        mock_account_repository.get_account_by_id.return_value = replace(
            mock_account, refresh_token=old_pair.refresh_token
        )

        new_pair = await auth_service.rotate_refresh_token(old_pair.refresh_token)

        assert new_pair.refresh_token != old_pair.refresh_token
        mock_account_repository.update_account.assert_awaited_once_with(
            1, refresh_token=new_pair.refresh_token
        )

    @pytest.mark.asyncio
    async def test_superseded_token_rejected(
        self, auth_service, mock_account_repository, mock_account, token_service
    ):
        identity = TokenPayload(user_id=1, role_id=2)
        old_token = token_service.issue(identity).refresh_token
        current_token = token_service.issue(identity).refresh_token
        mock_account_repository.get_account_by_id.return_value = replace(
            mock_account, refresh_token=current_token
        )

        with pytest.raises(RefreshTokenInvalidException):
            await auth_service.rotate_refresh_token(old_token)

        mock_account_repository.update_account.assert_not_called()

    @pytest.mark.asyncio
    async def test_access_token_rejected(self, auth_service, token_service):
        access_token = token_service.issue(TokenPayload(user_id=1, role_id=2)).access_token

        with pytest.raises(RefreshTokenInvalidException):
            await auth_service.rotate_refresh_token(access_token)


class TestAccountLifecycle:
    """Test cases for logout, verification and password management."""

    @pytest.mark.asyncio
    async def test_logout_clears_refresh_token(self, auth_service, mock_account_repository):
        await auth_service.logout(1)

        mock_account_repository.update_account.assert_awaited_once_with(1, refresh_token=None)

    @pytest.mark.asyncio
    async def test_verify_email(self, auth_service, mock_account_repository, mock_account):
        mock_account_repository.get_account_by_verification_token.return_value = replace(
            mock_account,
            is_email_verified=False,
            email_verification_token="token",
            email_verification_expiry=datetime.now(timezone.utc) + timedelta(minutes=5),
        )

        await auth_service.verify_email("token")

        mock_account_repository.update_account.assert_awaited_once_with(
            1,
            is_email_verified=True,
            email_verification_token=None,
            email_verification_expiry=None,
        )

    @pytest.mark.asyncio
    async def test_verify_email_expired_token(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_verification_token.return_value = replace(
            mock_account,
            email_verification_token="token",
            email_verification_expiry=datetime.now(timezone.utc) - timedelta(minutes=1),
        )

        with pytest.raises(InvalidVerificationTokenException):
            await auth_service.verify_email("token")

    @pytest.mark.asyncio
    async def test_change_password(
        self, auth_service, mock_account_repository, mock_account, password_service
    ):
        mock_account_repository.get_account_by_id.return_value = mock_account

        await auth_service.change_password(1, "password123", "new-password-456")

        new_hash = mock_account_repository.update_account.await_args.kwargs["password_hash"]
        assert password_service.verify_password("new-password-456", new_hash)

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_id.return_value = mock_account

        with pytest.raises(PasswordMismatchException):
            await auth_service.change_password(1, "wrong", "new-password-456")

    @pytest.mark.asyncio
    async def test_request_password_reset(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_email.return_value = mock_account

        token = await auth_service.request_password_reset("jane@example.com")

        kwargs = mock_account_repository.update_account.await_args.kwargs
        assert kwargs["password_reset_token"] == token
        assert kwargs["password_reset_expiry"] > datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_request_password_reset_unknown_email(
        self, auth_service, mock_account_repository
    ):
        mock_account_repository.get_account_by_email.return_value = None

        with pytest.raises(AccountNotFoundException):
            await auth_service.request_password_reset("nobody@example.com")

    @pytest.mark.asyncio
    async def test_reset_password_keeps_lockout(
        self, auth_service, mock_account_repository, mock_account
    ):
        mock_account_repository.get_account_by_reset_token.return_value = replace(
            mock_account,
            password_reset_token="reset",
            password_reset_expiry=datetime.now(timezone.utc) + timedelta(minutes=5),
        )

        await auth_service.reset_password("reset", "new-password-456")

        kwargs = mock_account_repository.update_account.await_args.kwargs
        assert kwargs["password_reset_token"] is None
        assert "locked_until" not in kwargs
        assert "failed_login_attempts" not in kwargs

    @pytest.mark.asyncio
    async def test_get_account_not_found(self, auth_service, mock_account_repository):
        mock_account_repository.get_account_by_id.return_value = None

        with pytest.raises(AccountNotFoundException):
            await auth_service.get_account(99)
