"""Per-request session resolution with transparent access-token refresh."""

import logging
from typing import NoReturn, Optional

from app.core.domain.enums import SessionState, TokenStatus
from .config import AuthConfig
from .entities import SessionResult, TokenPayload
from .exceptions import (
    AuthenticationException,
    InactiveAccountException,
    InsufficientRoleException,
    RefreshTokenInvalidException,
    TokenExpiredException,
    TokenMalformedException,
    TokenMissingException,
)
from .interfaces import AccountRepositoryInterface, TokenServiceInterface

logger = logging.getLogger(__name__)


class SessionService:
    """
    Resolves the identity behind an incoming request.

    A valid access token is accepted as is. An access token that failed only
    because it expired falls back to the refresh token, which must still be
    the one stored on the account; on success a new access token is minted
    while the refresh token stays unchanged. Every other outcome rejects the
    request.
    """

    def __init__(
        self,
        account_repository: AccountRepositoryInterface,
        token_service: TokenServiceInterface,
        config: AuthConfig,
    ) -> None:
        """
        Initialize session service.

        Args:
            account_repository: Account data access interface
            token_service: Token verification and issuance
            config: Authentication policy values
        """
        self._account_repository = account_repository
        self._token_service = token_service
        self._admin_role_id = config.admin_role_id

    async def resolve(
        self, access_token: Optional[str], refresh_token: Optional[str]
    ) -> SessionResult:
        """
        Resolve request tokens to an identity.

        Args:
            access_token: Access token from cookie or Authorization header
            refresh_token: Refresh token from cookie

        Returns:
            Session result; `access_token` is set when a new one was minted

        Raises:
            TokenMissingException: If neither token is present
            TokenMalformedException: If the access token is invalid for any reason but expiry
            TokenExpiredException: If the access token expired and no refresh token was sent
            RefreshTokenInvalidException: If the refresh fallback fails
        """
        if not access_token:
            if not refresh_token:
                self._reject(TokenMissingException(), SessionState.UNAUTHENTICATED)
            return await self._refresh(refresh_token, SessionState.NO_TOKEN)

        verification = self._token_service.verify_access_token(access_token)

        if verification.status == TokenStatus.VALID:
            return SessionResult(SessionState.ACCESS_VALID, verification.payload)

        if verification.status == TokenStatus.MALFORMED:
            self._reject(
                TokenMalformedException(verification.reason or "Invalid token"),
                SessionState.UNAUTHENTICATED,
            )

        if not refresh_token:
            self._reject(TokenExpiredException(), SessionState.UNAUTHENTICATED)

        return await self._refresh(refresh_token, SessionState.ACCESS_EXPIRED_REFRESH_INVALID)

    def require_role(self, identity: TokenPayload, role_id: int) -> TokenPayload:
        """
        Require an identity to hold a role.

        Raises:
            InsufficientRoleException: If the identity has another role
        """
        if identity.role_id != role_id:
            logger.info(
                "Account %s denied: role %s required, has %s",
                identity.user_id,
                role_id,
                identity.role_id,
            )
            raise InsufficientRoleException(role_id)
        return identity

    def require_admin(self, identity: TokenPayload) -> TokenPayload:
        return self.require_role(identity, self._admin_role_id)

    async def _refresh(self, refresh_token: str, failure_state: SessionState) -> SessionResult:
        verification = self._token_service.verify_refresh_token(refresh_token)
        if not verification.is_valid:
            self._reject(RefreshTokenInvalidException(), failure_state)

        identity = verification.payload
        account = await self._account_repository.get_account_by_id(identity.user_id)

        # Stored-token check precedes minting
        if account is None or not account.holds_refresh_token(refresh_token):
            logger.warning("Rejected superseded refresh token for account %s", identity.user_id)
            self._reject(RefreshTokenInvalidException("Invalid refresh token"), failure_state)

        if not account.is_active:
            logger.warning("Refused refresh for inactive account %s", account.id)
            self._reject(InactiveAccountException(account.id), failure_state)

        access_token = self._token_service.issue_access_token(identity)
        logger.info("Issued refreshed access token for account %s", identity.user_id)

        return SessionResult(
            SessionState.ACCESS_EXPIRED_REFRESH_VALID, identity, access_token
        )

    @staticmethod
    def _reject(exc: AuthenticationException, state: SessionState) -> NoReturn:
        logger.debug("Session rejected in state %s: %s", state.value, exc.message)
        raise exc
