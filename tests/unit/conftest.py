"""Common fixtures for unit tests."""

from datetime import timedelta

import pytest

from app.core.auth.cipher import PayloadCipher
from app.core.auth.config import AuthConfig
from app.core.auth.services import PasswordService, TokenService


@pytest.fixture
def auth_config():
    """Create auth config with fixed test secrets."""
    return AuthConfig(
        cipher_secret="unit-test-cipher-secret",
        access_token_secret="unit-test-access-secret",
        refresh_token_secret="unit-test-refresh-secret",
    )


@pytest.fixture
def expired_auth_config():
    """Create auth config whose tokens are expired when issued."""
    return AuthConfig(
        cipher_secret="unit-test-cipher-secret",
        access_token_secret="unit-test-access-secret",
        refresh_token_secret="unit-test-refresh-secret",
        access_token_ttl=timedelta(minutes=-1),
        refresh_token_ttl=timedelta(minutes=-1),
    )


@pytest.fixture
def cipher(auth_config):
    """Create payload cipher."""
    return PayloadCipher(auth_config)


@pytest.fixture
def token_service(cipher, auth_config):
    """Create token service."""
    return TokenService(cipher, auth_config)


@pytest.fixture
def expired_token_service(expired_auth_config):
    """Create token service issuing already-expired tokens."""
    return TokenService(PayloadCipher(expired_auth_config), expired_auth_config)


@pytest.fixture
def password_service():
    """Create password service with cheap bcrypt rounds."""
    return PasswordService(rounds=4)
