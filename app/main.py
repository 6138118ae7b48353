"""Main FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.endpoints.auth.routes import router as auth_router
from app.api.v1.endpoints.health.routes import router as health_router
from app.api.v1.endpoints.roles.routes import router as roles_router
from app.core.auth.exceptions import AuthenticationException, AuthorizationException
from app.core.exceptions import DomainException, StoreUnavailableException
from app.infrastructure.database.repositories.role_repository import SqlRoleRepository
from app.infrastructure.database.session import (
    close_db_connections,
    create_tables,
    get_session_maker,
)
from app.utils.logging import setup_logging
from app.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    setup_logging()
    logger = logging.getLogger("app")
    logger.info("Starting Storefront Auth API...")

    try:
        await create_tables()
        logger.info("Database tables created")

        async with get_session_maker()() as session:
            created = await SqlRoleRepository(session).ensure_default_roles()
            await session.commit()
        logger.info("Default roles ensured (%d created)", created)

        logger.info("Storefront Auth API started successfully")

    except Exception:
        logger.exception("Startup failed")
        raise

    yield

    logger.info("Shutting down Storefront Auth API...")
    await close_db_connections()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(roles_router, prefix="/api/v1")

    register_exception_handlers(app)

    register_middleware(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException):
        """Handle domain exceptions not mapped by a route."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": exc.message, "type": exc.__class__.__name__},
        )

    @app.exception_handler(AuthenticationException)
    async def authentication_exception_handler(
        request: Request, exc: AuthenticationException
    ):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": exc.message, "type": exc.__class__.__name__},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AuthorizationException)
    async def authorization_exception_handler(
        request: Request, exc: AuthorizationException
    ):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"error": exc.message, "type": exc.__class__.__name__},
        )

    @app.exception_handler(StoreUnavailableException)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailableException):
        """Handle lost database connectivity."""
        logging.getLogger("app").error("Data store unavailable: %s", exc.details)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": exc.message, "type": "StoreUnavailable"},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle FastAPI HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "type": "HTTPException"},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger = logging.getLogger("app")
        logger.error(f"Unhandled exception: {exc}", exc_info=True)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "type": "InternalError"},
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware."""

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log all HTTP requests."""
        logger = logging.getLogger("app")

        start_time = request.state.start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(f"Request started: {request.method} {request.url.path} from {client_ip}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} time={process_time:.3f}s"
        )

        return response

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        """Add security headers to responses."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"

        return response


app = create_app()


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": settings.api_title,
        "version": settings.api_version,
        "docs": "/docs",
    }


@app.get("/health", include_in_schema=False)
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "storefront-auth"}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
