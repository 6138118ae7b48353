"""Health check API routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_database_session
from app.settings import get_settings
from .schemas import HealthResponse, DetailedHealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health Check"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get(
    "/",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Simple health check endpoint.",
)
async def basic_health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns minimal health status information without dependency checks.
    """
    return HealthResponse(status="healthy", timestamp=_timestamp())


@router.get(
    "/detailed",
    response_model=DetailedHealthResponse,
    summary="Detailed health check",
    description="Check the health status of the application and its database.",
)
async def detailed_health_check(
    session: AsyncSession = Depends(get_database_session),
) -> DetailedHealthResponse:
    services = {}
    overall_status = "healthy"

    try:
        await session.execute(text("SELECT 1"))
        services["database"] = "healthy"
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        services["database"] = "unhealthy"
        overall_status = "unhealthy"

    return DetailedHealthResponse(
        status=overall_status,
        version=get_settings().api_version,
        timestamp=_timestamp(),
        services=services,
    )
