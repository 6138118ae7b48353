"""Common fixtures for integration tests."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.api.dependencies as deps
from app.core.auth.entities import Account, TokenPair, TokenPayload
from app.core.auth.services import PasswordService
from app.infrastructure.database.repositories.role_repository import SqlRoleRepository
from app.infrastructure.database.session import create_tables


@pytest.fixture(scope="function")
def client():
    """Create test client without database initialization."""
    from tests.integration.test_app import create_test_app

    app = create_test_app()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def mock_account():
    """Create a verified customer account for testing."""
    return Account(
        id=1,
        name="Jane",
        email="jane@example.com",
        password_hash="$2b$12$hashed_password_example",
        is_email_verified=True,
        email_verification_token="verify-token",
        created_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def mock_token_pair():
    """Create a mock token pair for testing."""
    return TokenPair(
        access_token="eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.test.access",
        refresh_token="eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.test.refresh",
        token_type="bearer",
        expires_in=900,
    )


@pytest.fixture
def mock_auth_service():
    """Create a mock authentication service."""
    service = AsyncMock()
    service.register_account = AsyncMock()
    service.authenticate = AsyncMock()
    service.rotate_refresh_token = AsyncMock()
    service.logout = AsyncMock()
    service.verify_email = AsyncMock()
    service.change_password = AsyncMock()
    service.request_password_reset = AsyncMock()
    service.reset_password = AsyncMock()
    service.get_account = AsyncMock()
    return service


@pytest.fixture
def override_auth_dependency(client, mock_auth_service):
    """Override authentication service dependency."""
    client.app.dependency_overrides[deps.get_auth_service] = lambda: mock_auth_service
    yield mock_auth_service
    client.app.dependency_overrides.clear()


@pytest.fixture
def customer_identity():
    return TokenPayload(user_id=1, role_id=2)


@pytest.fixture
def authenticated_client(client, customer_identity):
    """Create test client whose requests resolve to a customer."""
    client.app.dependency_overrides[deps.get_current_identity] = lambda: customer_identity
    yield client
    client.app.dependency_overrides.clear()


@pytest.fixture
def mock_role_repository():
    """Create a mock role repository."""
    return AsyncMock()


@pytest.fixture
def override_role_repository(client, mock_role_repository):
    client.app.dependency_overrides[deps.get_role_repository] = lambda: mock_role_repository
    yield mock_role_repository
    client.app.dependency_overrides.clear()


@pytest.fixture
def mock_session_service():
    """Create a session service mock that never refreshes."""
    service = MagicMock()
    service.resolve = AsyncMock()
    return service


@pytest.fixture
def test_session_maker(tmp_path):
    """Create a session maker on a fresh SQLite database with seeded roles."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'integration.sqlite'}",
        poolclass=NullPool,
    )
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def prepare():
        await create_tables(engine)
        async with session_maker() as session:
            await SqlRoleRepository(session).ensure_default_roles()
            await session.commit()

    asyncio.run(prepare())
    yield session_maker
    asyncio.run(engine.dispose())


@pytest.fixture
def db_client(client, test_session_maker, monkeypatch):
    """Create test client backed by real services and a SQLite database."""
    monkeypatch.setattr(deps, "get_session_maker", lambda: test_session_maker)
    monkeypatch.setattr(deps, "get_password_service", lambda: PasswordService(rounds=4))
    yield client
