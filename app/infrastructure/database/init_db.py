"""Database initialization utilities."""

import logging
from pathlib import Path
from typing import Dict

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from app.core.services.auth.models import AccountModel, RoleModel
from app.infrastructure.database.repositories.role_repository import SqlRoleRepository
from app.infrastructure.database.session import create_tables, get_session_maker

logger = logging.getLogger(__name__)


def get_alembic_config() -> Config:
    """Get Alembic configuration from the project root."""
    project_root = Path(__file__).parent.parent.parent.parent
    return Config(str(project_root / "alembic.ini"))


def run_alembic_migrations() -> None:
    """Run all pending Alembic migrations."""
    command.upgrade(get_alembic_config(), "head")


async def init_database() -> int:
    """
    Create missing tables and seed the default roles.

    Returns:
        Number of roles created
    """
    await create_tables()
    logger.info("Database tables created")

    async with get_session_maker()() as session:
        created = await SqlRoleRepository(session).ensure_default_roles()
        await session.commit()

    logger.info("Default roles ensured (%d created)", created)
    return created


async def check_database_health() -> bool:
    """Check database connectivity."""
    try:
        async with get_session_maker()() as session:
            await session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


async def get_database_info() -> Dict[str, Dict[str, int]]:
    """Get row counts of the auth tables."""
    async with get_session_maker()() as session:
        accounts = await session.scalar(select(func.count()).select_from(AccountModel))
        roles = await session.scalar(select(func.count()).select_from(RoleModel))

    return {"tables": {"accounts": accounts or 0, "roles": roles or 0}}
