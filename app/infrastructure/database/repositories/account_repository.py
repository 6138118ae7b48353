"""Account repository implementation."""

import functools
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth.entities import Account
from app.core.auth.exceptions import AccountAlreadyExistsException
from app.core.auth.interfaces import AccountRepositoryInterface
from app.core.exceptions import StoreUnavailableException
from app.core.services.auth.models import AccountModel

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "password_hash",
        "role_id",
        "is_email_verified",
        "is_active",
        "failed_login_attempts",
        "locked_until",
        "refresh_token",
        "provider",
        "provider_id",
        "last_login_at",
        "email_verification_token",
        "email_verification_expiry",
        "password_reset_token",
        "password_reset_expiry",
    }
)


def translate_store_errors(func):
    """Surface lost database connectivity as StoreUnavailableException."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except OperationalError as e:
            raise StoreUnavailableException(str(e.orig)) from e

    return wrapper


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAccountRepository(AccountRepositoryInterface):
    """SQLAlchemy implementation of account repository."""

    def __init__(self, session: AsyncSession):
        """
        Initialize account repository.

        Args:
            session: Database session
        """
        self._session = session

    @translate_store_errors
    async def get_account_by_id(self, account_id: int) -> Optional[Account]:
        """
        Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity if found, None otherwise
        """
        return await self._get_one(AccountModel.id == account_id)

    @translate_store_errors
    async def get_account_by_email(self, email: str) -> Optional[Account]:
        """
        Get account by email.

        Args:
            email: Email address

        Returns:
            Account entity if found, None otherwise
        """
        return await self._get_one(AccountModel.email == email)

    @translate_store_errors
    async def get_account_by_verification_token(self, token: str) -> Optional[Account]:
        return await self._get_one(AccountModel.email_verification_token == token)

    @translate_store_errors
    async def get_account_by_reset_token(self, token: str) -> Optional[Account]:
        return await self._get_one(AccountModel.password_reset_token == token)

    @translate_store_errors
    async def create_account(self, account: Account) -> Account:
        """
        Create new account.

        Args:
            account: Account entity to create

        Returns:
            Created account entity with ID

        Raises:
            AccountAlreadyExistsException: If email already exists
        """
        account_model = AccountModel(
            name=account.name,
            email=account.email,
            password_hash=account.password_hash,
            role_id=account.role_id,
            is_email_verified=account.is_email_verified,
            is_active=account.is_active,
            failed_login_attempts=account.failed_login_attempts,
            provider=account.provider,
            provider_id=account.provider_id,
            email_verification_token=account.email_verification_token,
            email_verification_expiry=account.email_verification_expiry,
        )

        try:
            self._session.add(account_model)
            await self._session.flush()
            await self._session.refresh(account_model)
            return self._model_to_entity(account_model)
        except IntegrityError:
            await self._session.rollback()
            raise AccountAlreadyExistsException(account.email)

    @translate_store_errors
    async def update_account(self, account_id: int, **fields: Any) -> Optional[Account]:
        """
        Apply a partial update to an account.

        Args:
            account_id: Account ID
            **fields: Column values to overwrite

        Returns:
            Updated account entity, None if not found

        Raises:
            ValueError: If a field is not updatable
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        result = await self._session.execute(
            select(AccountModel).where(AccountModel.id == account_id)
        )
        account_model = result.scalar_one_or_none()
        if not account_model:
            return None

        for name, value in fields.items():
            setattr(account_model, name, value)

        await self._session.flush()
        await self._session.refresh(account_model)
        return self._model_to_entity(account_model)

    async def _get_one(self, condition) -> Optional[Account]:
        result = await self._session.execute(select(AccountModel).where(condition))
        account_model = result.scalar_one_or_none()

        if account_model:
            return self._model_to_entity(account_model)
        return None

    def _model_to_entity(self, model: AccountModel) -> Account:
        """
        Convert database model to domain entity.

        Args:
            model: Account database model

        Returns:
            Account domain entity
        """
        return Account(
            id=model.id,
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            role_id=model.role_id,
            is_email_verified=model.is_email_verified,
            is_active=model.is_active,
            failed_login_attempts=model.failed_login_attempts,
            locked_until=as_utc(model.locked_until),
            refresh_token=model.refresh_token,
            provider=model.provider,
            provider_id=model.provider_id,
            last_login_at=as_utc(model.last_login_at),
            email_verification_token=model.email_verification_token,
            email_verification_expiry=as_utc(model.email_verification_expiry),
            password_reset_token=model.password_reset_token,
            password_reset_expiry=as_utc(model.password_reset_expiry),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
