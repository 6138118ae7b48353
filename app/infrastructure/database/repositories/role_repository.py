"""Role repository implementation."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth.entities import Role
from app.core.auth.interfaces import RoleRepositoryInterface
from app.core.exceptions import (
    RoleAlreadyExistsException,
    RoleInUseException,
    RoleNotFoundException,
)
from app.core.services.auth.models import AccountModel, RoleModel
from .account_repository import translate_store_errors

logger = logging.getLogger(__name__)

# Seeded in this order so a fresh table assigns admin=1, customer=2
DEFAULT_ROLES = ("admin", "customer")


class SqlRoleRepository(RoleRepositoryInterface):
    """SQLAlchemy implementation of role repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @translate_store_errors
    async def list_roles(self) -> List[Role]:
        result = await self._session.execute(select(RoleModel).order_by(RoleModel.id))
        return [self._model_to_entity(model) for model in result.scalars().all()]

    @translate_store_errors
    async def get_role_by_name(self, name: str) -> Optional[Role]:
        result = await self._session.execute(
            select(RoleModel).where(RoleModel.name == name)
        )
        role_model = result.scalar_one_or_none()

        if role_model:
            return self._model_to_entity(role_model)
        return None

    @translate_store_errors
    async def create_role(self, role: Role) -> Role:
        """
        Create new role.

        Raises:
            RoleAlreadyExistsException: If role name is taken
        """
        role_model = RoleModel(name=role.name)

        try:
            self._session.add(role_model)
            await self._session.flush()
            return self._model_to_entity(role_model)
        except IntegrityError:
            await self._session.rollback()
            raise RoleAlreadyExistsException(role.name)

    @translate_store_errors
    async def get_role_by_id(self, role_id: int) -> Optional[Role]:
        role_model = await self._session.get(RoleModel, role_id)
        if role_model:
            return self._model_to_entity(role_model)
        return None

    @translate_store_errors
    async def update_role(self, role_id: int, name: str) -> Role:
        """
        Rename a role.

        Raises:
            RoleNotFoundException: If role does not exist
            RoleAlreadyExistsException: If another role has the name
        """
        role_model = await self._session.get(RoleModel, role_id)
        if role_model is None:
            raise RoleNotFoundException(role_id)

        try:
            role_model.name = name
            await self._session.flush()
            return self._model_to_entity(role_model)
        except IntegrityError:
            await self._session.rollback()
            raise RoleAlreadyExistsException(name)

    @translate_store_errors
    async def delete_role(self, role_id: int) -> None:
        """
        Delete a role no account holds.

        Raises:
            RoleNotFoundException: If role does not exist
            RoleInUseException: If accounts are assigned the role
        """
        role_model = await self._session.get(RoleModel, role_id)
        if role_model is None:
            raise RoleNotFoundException(role_id)

        holders = await self._session.scalar(
            select(func.count()).select_from(AccountModel).where(AccountModel.role_id == role_id)
        )
        if holders:
            raise RoleInUseException(role_id)

        await self._session.delete(role_model)
        await self._session.flush()
        logger.info("Deleted role %s (%s)", role_model.name, role_id)

    async def ensure_default_roles(self) -> int:
        """
        Seed the admin and customer roles when missing.

        Returns:
            Number of roles created
        """
        created = 0
        for name in DEFAULT_ROLES:
            if await self.get_role_by_name(name) is None:
                role = await self.create_role(Role(id=None, name=name))
                logger.info("Created role %s with id %s", role.name, role.id)
                created += 1
        return created

    def _model_to_entity(self, model: RoleModel) -> Role:
        return Role(id=model.id, name=model.name)
