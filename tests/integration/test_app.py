"""Test application setup for integration tests."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.endpoints.auth.routes import router as auth_router
from app.api.v1.endpoints.health.routes import router as health_router
from app.api.v1.endpoints.roles.routes import router as roles_router
from app.main import register_exception_handlers


@asynccontextmanager
async def _test_lifespan(app: FastAPI):
    """Test lifespan that doesn't initialize database."""
    yield


def create_test_app() -> FastAPI:
    """Create FastAPI app for testing without database initialization."""
    app = FastAPI(
        title="Storefront Auth Test",
        description="Test instance",
        version="1.0.0",
        lifespan=_test_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(roles_router, prefix="/api/v1")

    register_exception_handlers(app)

    return app
