"""FastAPI dependency injection setup."""

from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.cookies import read_access_token, read_refresh_token, set_access_cookie
from app.core.auth.cipher import PayloadCipher
from app.core.auth.config import AuthConfig
from app.core.auth.entities import TokenPayload
from app.core.auth.exceptions import AuthenticationException, InsufficientRoleException
from app.core.auth.lockout import CredentialVerifier, LockoutPolicy
from app.core.auth.services import AuthenticationService, PasswordService, TokenService
from app.core.auth.session import SessionService
from app.infrastructure.database.repositories.account_repository import SqlAccountRepository
from app.infrastructure.database.repositories.role_repository import SqlRoleRepository
from app.infrastructure.database.session import get_session_maker
from app.settings import get_settings


@lru_cache
def get_auth_config() -> AuthConfig:
    return AuthConfig.from_settings(get_settings())


@lru_cache
def get_token_service() -> TokenService:
    config = get_auth_config()
    return TokenService(PayloadCipher(config), config)


@lru_cache
def get_password_service() -> PasswordService:
    return PasswordService(rounds=get_settings().bcrypt_rounds)


async def get_database_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide database session for dependency injection.

    Commits when the request completes. Client errors raised as
    HTTPException still commit, so rejected logins keep their recorded
    failed attempts and lockout; anything else rolls back.

    Yields:
        AsyncSession: Database session
    """
    async with get_session_maker()() as session:
        try:
            yield session
        except HTTPException as e:
            if e.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
                await session.commit()
            else:
                await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


async def get_account_repository(
        session: AsyncSession = Depends(get_database_session),
) -> SqlAccountRepository:
    return SqlAccountRepository(session)


async def get_role_repository(
        session: AsyncSession = Depends(get_database_session),
) -> SqlRoleRepository:
    return SqlRoleRepository(session)


async def get_auth_service(
        account_repository: SqlAccountRepository = Depends(get_account_repository),
) -> AuthenticationService:
    """
    Provide authentication service for dependency injection.

    Args:
        account_repository: Request-scoped account repository

    Returns:
        AuthenticationService: Authentication service instance
    """
    config = get_auth_config()
    password_service = get_password_service()
    verifier = CredentialVerifier(
        account_repository, password_service, LockoutPolicy(config)
    )

    return AuthenticationService(
        account_repository,
        password_service,
        get_token_service(),
        verifier,
        config,
    )


async def get_session_service(
        account_repository: SqlAccountRepository = Depends(get_account_repository),
) -> SessionService:
    return SessionService(account_repository, get_token_service(), get_auth_config())


async def get_current_identity(
        request: Request,
        response: Response,
        session_service: SessionService = Depends(get_session_service),
) -> TokenPayload:
    """
    Get the identity behind the request's access or refresh token.

    When the access token had expired and the refresh token was accepted,
    the newly minted access token is set on the response cookie.

    Args:
        request: Incoming request
        response: Outgoing response
        session_service: Session resolution service

    Returns:
        TokenPayload: Authenticated identity

    Raises:
        HTTPException: 401 if no usable token was presented
    """
    try:
        result = await session_service.resolve(
            read_access_token(request), read_refresh_token(request)
        )
    except AuthenticationException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    if result.refreshed:
        set_access_cookie(response, result.access_token)

    request.state.identity = result.identity
    return result.identity


async def get_admin_identity(
        identity: TokenPayload = Depends(get_current_identity),
        session_service: SessionService = Depends(get_session_service),
) -> TokenPayload:
    """
    Require the authenticated identity to hold the admin role.

    Raises:
        HTTPException: 403 if the identity is not an admin
    """
    try:
        return session_service.require_admin(identity)
    except InsufficientRoleException as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
