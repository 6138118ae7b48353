"""Authentication service implementations."""

import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.domain.enums import TokenKind
from .config import AuthConfig
from .entities import Account, TokenPair, TokenPayload, TokenVerification
from .exceptions import (
    AccountAlreadyExistsException,
    AccountNotFoundException,
    EmailNotVerifiedException,
    InactiveAccountException,
    InvalidCredentialsException,
    InvalidVerificationTokenException,
    NoPasswordSetException,
    PasswordMismatchException,
    PayloadCipherError,
    RefreshTokenInvalidException,
)
from .interfaces import (
    AccountRepositoryInterface,
    PasswordServiceInterface,
    PayloadCipherInterface,
    TokenServiceInterface,
)
from .lockout import CredentialVerifier

logger = logging.getLogger(__name__)


class PasswordService(PasswordServiceInterface):
    """
    BCrypt-based password hashing service.

    Provides secure password hashing and verification using bcrypt algorithm
    with configurable rounds for performance vs security balance.
    """

    def __init__(self, rounds: int = 12) -> None:
        """Initialize password context with bcrypt."""
        self._pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password securely using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        return self._pwd_context.hash(password)

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify password against bcrypt hash.

        Args:
            password: Plain text password
            hashed_password: Stored password hash

        Returns:
            True if password matches, False otherwise
        """
        return self._pwd_context.verify(password, hashed_password)


class TokenService(TokenServiceInterface):
    """
    JWT token service wrapping an encrypted identity payload.

    Access and refresh tokens are signed with distinct secrets and lifetimes.
    Both carry the same ciphertext in their `data` claim, so a token is only
    usable when its signature verifies and its payload decrypts.
    """

    def __init__(self, cipher: PayloadCipherInterface, config: AuthConfig) -> None:
        """
        Initialize token service.

        Args:
            cipher: Payload cipher used for the `data` claim
            config: Signing secrets and lifetimes
        """
        self._cipher = cipher
        self._algorithm = config.jwt_algorithm
        self._secrets = {
            TokenKind.ACCESS: config.access_token_secret,
            TokenKind.REFRESH: config.refresh_token_secret,
        }
        self._lifetimes = {
            TokenKind.ACCESS: config.access_token_ttl,
            TokenKind.REFRESH: config.refresh_token_ttl,
        }

    def issue(self, payload: TokenPayload) -> TokenPair:
        """
        Create access and refresh token pair for an identity.

        Args:
            payload: Identity claims

        Returns:
            Token pair with access and refresh tokens
        """
        data = self._cipher.encrypt(payload)
        now = datetime.now(timezone.utc)

        return TokenPair(
            access_token=self._sign(data, TokenKind.ACCESS, now),
            refresh_token=self._sign(data, TokenKind.REFRESH, now),
            expires_in=int(self._lifetimes[TokenKind.ACCESS].total_seconds()),
        )

    def issue_access_token(self, payload: TokenPayload) -> str:
        return self._sign(
            self._cipher.encrypt(payload), TokenKind.ACCESS, datetime.now(timezone.utc)
        )

    def verify_access_token(self, token: str) -> TokenVerification:
        return self._verify(token, TokenKind.ACCESS)

    def verify_refresh_token(self, token: str) -> TokenVerification:
        return self._verify(token, TokenKind.REFRESH)

    def _sign(self, data: str, kind: TokenKind, now: datetime) -> str:
        claims = {
            "data": data,
            "iat": now,
            "exp": now + self._lifetimes[kind],
        }
        return jwt.encode(claims, self._secrets[kind], algorithm=self._algorithm)

    def _verify(self, token: str, kind: TokenKind) -> TokenVerification:
        try:
            claims = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_iat": True},
            )
        except ExpiredSignatureError:
            return TokenVerification.expired()
        except JWTError as e:
            return TokenVerification.malformed(f"Token decode error: {e}")

        data = claims.get("data")
        if not isinstance(data, str):
            return TokenVerification.malformed("Token carries no payload")

        try:
            return TokenVerification.valid(self._cipher.decrypt(data))
        except PayloadCipherError as e:
            return TokenVerification.malformed(f"Token payload rejected: {e.message}")


class AuthenticationService:
    """
    High-level authentication service orchestrating account operations.

    Combines credential verification, token issuance and account updates
    for registration, login, refresh-token rotation and password management.
    """

    def __init__(
        self,
        account_repository: AccountRepositoryInterface,
        password_service: PasswordServiceInterface,
        token_service: TokenServiceInterface,
        credential_verifier: CredentialVerifier,
        config: AuthConfig,
    ) -> None:
        """
        Initialize authentication service.

        Args:
            account_repository: Account data access interface
            password_service: Password hashing service
            token_service: Token management service
            credential_verifier: Password check with lockout handling
            config: Authentication policy values
        """
        self._account_repository = account_repository
        self._password_service = password_service
        self._token_service = token_service
        self._credential_verifier = credential_verifier
        self._config = config

    async def register_account(self, name: str, email: str, password: str) -> Account:
        """
        Register new account.

        Args:
            name: Display name
            email: Unique email address
            password: Plain text password

        Returns:
            Created account entity

        Raises:
            AccountAlreadyExistsException: If email already exists
        """
        existing = await self._account_repository.get_account_by_email(email)
        if existing:
            raise AccountAlreadyExistsException(email)

        token, expiry = self._new_one_time_token(self._config.email_verification_ttl)
        account = Account(
            id=0,
            name=name,
            email=email,
            password_hash=self._password_service.hash_password(password),
            role_id=self._config.default_role_id,
            email_verification_token=token,
            email_verification_expiry=expiry,
        )

        created = await self._account_repository.create_account(account)
        logger.info("Registered account %s", created.id)
        return created

    async def authenticate(self, email: str, password: str) -> TokenPair:
        """
        Authenticate account and return token pair.

        The new refresh token replaces any previously stored one, ending
        every other session of the account.

        Args:
            email: Account email
            password: Plain text password

        Returns:
            Token pair for authenticated account

        Raises:
            InvalidCredentialsException: If email is unknown or password wrong
            AccountLockedException: If the account is or just became locked
            NoPasswordSetException: If the account has no password
            InactiveAccountException: If account is inactive
            EmailNotVerifiedException: If the email address is not verified
        """
        account = await self._account_repository.get_account_by_email(email)
        if not account:
            raise InvalidCredentialsException()

        if not await self._credential_verifier.verify(account, password):
            raise InvalidCredentialsException()

        if not account.is_active:
            raise InactiveAccountException(account.id)

        if not account.is_email_verified:
            token, expiry = self._new_one_time_token(self._config.email_verification_ttl)
            await self._account_repository.update_account(
                account.id,
                email_verification_token=token,
                email_verification_expiry=expiry,
            )
            raise EmailNotVerifiedException()

        token_pair = self._token_service.issue(
            TokenPayload(user_id=account.id, role_id=account.role_id)
        )

        await self._account_repository.update_account(
            account.id,
            last_login_at=datetime.now(timezone.utc),
            failed_login_attempts=0,
            refresh_token=token_pair.refresh_token,
        )
        logger.info("Account %s logged in", account.id)

        return token_pair

    async def rotate_refresh_token(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new token pair.

        Args:
            refresh_token: Refresh token currently stored for the account

        Returns:
            New token pair; the new refresh token supersedes the old one

        Raises:
            RefreshTokenInvalidException: If the token is invalid, expired or superseded
            InactiveAccountException: If account is inactive
        """
        verification = self._token_service.verify_refresh_token(refresh_token)
        if not verification.is_valid:
            raise RefreshTokenInvalidException()

        account = await self._account_repository.get_account_by_id(
            verification.payload.user_id
        )
        if account is None or not account.holds_refresh_token(refresh_token):
            logger.warning(
                "Rejected superseded refresh token for account %s",
                verification.payload.user_id,
            )
            raise RefreshTokenInvalidException("Invalid refresh token")

        if not account.is_active:
            raise InactiveAccountException(account.id)

        token_pair = self._token_service.issue(
            TokenPayload(user_id=account.id, role_id=account.role_id)
        )
        await self._account_repository.update_account(
            account.id, refresh_token=token_pair.refresh_token
        )

        return token_pair

    async def logout(self, account_id: int) -> None:
        """Invalidate the stored refresh token of an account."""
        await self._account_repository.update_account(account_id, refresh_token=None)
        logger.info("Account %s logged out", account_id)

    async def verify_email(self, token: str) -> Account:
        """
        Confirm an email address with its verification token.

        Raises:
            InvalidVerificationTokenException: If token is unknown or expired
        """
        account = await self._account_repository.get_account_by_verification_token(token)
        if not account or not _still_valid(account.email_verification_expiry):
            raise InvalidVerificationTokenException()

        return await self._account_repository.update_account(
            account.id,
            is_email_verified=True,
            email_verification_token=None,
            email_verification_expiry=None,
        )

    async def change_password(
        self, account_id: int, current_password: str, new_password: str
    ) -> None:
        """
        Change password after checking the current one.

        Raises:
            AccountNotFoundException: If account does not exist
            NoPasswordSetException: If the account has no password
            PasswordMismatchException: If current password is wrong
        """
        account = await self.get_account(account_id)

        if not account.has_password:
            raise NoPasswordSetException()

        if not self._password_service.verify_password(
            current_password, account.password_hash
        ):
            raise PasswordMismatchException()

        await self._account_repository.update_account(
            account_id, password_hash=self._password_service.hash_password(new_password)
        )

    async def request_password_reset(self, email: str) -> str:
        """
        Generate a password reset token.

        Returns:
            The one-time reset token

        Raises:
            AccountNotFoundException: If no account has this email
        """
        account = await self._account_repository.get_account_by_email(email)
        if not account:
            raise AccountNotFoundException(email)

        token, expiry = self._new_one_time_token(self._config.password_reset_ttl)
        await self._account_repository.update_account(
            account.id, password_reset_token=token, password_reset_expiry=expiry
        )
        logger.info("Password reset requested for account %s", account.id)

        return token

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Set a new password using a reset token.

        Raises:
            InvalidVerificationTokenException: If token is unknown or expired
        """
        account = await self._account_repository.get_account_by_reset_token(token)
        if not account or not _still_valid(account.password_reset_expiry):
            raise InvalidVerificationTokenException()

        await self._account_repository.update_account(
            account.id,
            password_hash=self._password_service.hash_password(new_password),
            password_reset_token=None,
            password_reset_expiry=None,
        )

    async def get_account(self, account_id: int) -> Account:
        """
        Get account by ID.

        Raises:
            AccountNotFoundException: If account not found
        """
        account = await self._account_repository.get_account_by_id(account_id)
        if not account:
            raise AccountNotFoundException(str(account_id))
        return account

    @staticmethod
    def _new_one_time_token(ttl) -> tuple[str, datetime]:
        return secrets.token_hex(20), datetime.now(timezone.utc) + ttl


def _still_valid(expiry: Optional[datetime]) -> bool:
    return expiry is not None and expiry > datetime.now(timezone.utc)
