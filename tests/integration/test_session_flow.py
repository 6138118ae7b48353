"""End-to-end authentication flows against a SQLite database."""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

import app.api.dependencies as deps
from app.core.auth.cipher import PayloadCipher
from app.core.auth.entities import TokenPayload
from app.core.auth.services import TokenService
from app.infrastructure.database.repositories.account_repository import SqlAccountRepository

PASSWORD = "password123"


def _cookies(access=None, refresh=None):
    parts = []
    if access:
        parts.append(f"accessToken={access}")
    if refresh:
        parts.append(f"refreshToken={refresh}")
    return {"Cookie": "; ".join(parts)}


def _expired_access_token(identity: TokenPayload) -> str:
    config = replace(deps.get_auth_config(), access_token_ttl=timedelta(minutes=-1))
    return TokenService(PayloadCipher(config), config).issue_access_token(identity)


def _register_and_verify(client, email="jane@example.com"):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "Jane", "email": email, "password": PASSWORD},
    )
    assert response.status_code == 201
    account = response.json()

    response = client.post(
        "/api/v1/auth/verify-email", json={"token": account["verification_token"]}
    )
    assert response.status_code == 200
    return account


def _login(client, email="jane@example.com", password=PASSWORD):
    response = client.post(
        "/api/v1/auth/login", json={"email": email, "password": password}
    )
    client.cookies.clear()
    return response


def _load_account(session_maker, email):
    async def load():
        async with session_maker() as session:
            return await SqlAccountRepository(session).get_account_by_email(email)

    return asyncio.run(load())


def _update_account(session_maker, account_id, **fields):
    async def update():
        async with session_maker() as session:
            await SqlAccountRepository(session).update_account(account_id, **fields)
            await session.commit()

    asyncio.run(update())


class TestLoginFlow:
    """Test registration, verification and login."""

    def test_unverified_login_is_refused(self, db_client):
        db_client.post(
            "/api/v1/auth/register",
            json={"name": "Jane", "email": "jane@example.com", "password": PASSWORD},
        )

        response = _login(db_client)

        assert response.status_code == 400

    def test_login_and_me(self, db_client, test_session_maker):
        account = _register_and_verify(db_client)

        tokens = _login(db_client).json()
        response = db_client.get("/api/v1/auth/me", headers=_cookies(tokens["access_token"]))

        assert response.status_code == 200
        assert response.json()["id"] == account["id"]
        stored = _load_account(test_session_maker, "jane@example.com")
        assert stored.refresh_token == tokens["refresh_token"]
        assert stored.last_login_at is not None


class TestLockoutFlow:
    """Test failed-login counting and lockout across requests."""

    def test_third_failure_locks_for_24_hours(self, db_client, test_session_maker):
        _register_and_verify(db_client)

        assert _login(db_client, password="wrong").status_code == 401
        assert _login(db_client, password="wrong").status_code == 401
        assert _load_account(test_session_maker, "jane@example.com").failed_login_attempts == 2

        response = _login(db_client, password="wrong")

        assert response.status_code == 423
        stored = _load_account(test_session_maker, "jane@example.com")
        assert stored.failed_login_attempts == 0
        assert stored.locked_until is not None
        remaining = stored.locked_until - datetime.now(timezone.utc)
        assert timedelta(hours=23, minutes=59) < remaining <= timedelta(hours=24)

    def test_locked_account_refuses_correct_password(self, db_client, test_session_maker):
        _register_and_verify(db_client)
        for _ in range(3):
            _login(db_client, password="wrong")

        response = _login(db_client)

        assert response.status_code == 423
        assert response.json()["error"] == "Your account has been blocked for 24 hrs"

    def test_success_resets_counter(self, db_client, test_session_maker):
        _register_and_verify(db_client)
        _login(db_client, password="wrong")

        assert _login(db_client).status_code == 200
        assert _load_account(test_session_maker, "jane@example.com").failed_login_attempts == 0

    def test_password_reset_does_not_unlock(self, db_client):
        _register_and_verify(db_client)
        for _ in range(3):
            _login(db_client, password="wrong")

        reset_token = db_client.post(
            "/api/v1/auth/forgot-password", json={"email": "jane@example.com"}
        ).json()["reset_token"]
        response = db_client.patch(
            "/api/v1/auth/forgot-password",
            json={"token": reset_token, "new_password": "new-password-456"},
        )
        assert response.status_code == 200

        assert _login(db_client, password="new-password-456").status_code == 423


class TestSessionRefreshFlow:
    """Test transparent access-token refresh and refresh-token rotation."""

    def test_expired_access_token_is_renewed(self, db_client):
        account = _register_and_verify(db_client)
        tokens = _login(db_client).json()
        expired = _expired_access_token(TokenPayload(user_id=account["id"], role_id=2))

        response = db_client.get(
            "/api/v1/auth/me", headers=_cookies(expired, tokens["refresh_token"])
        )

        assert response.status_code == 200
        new_access = response.cookies.get("accessToken")
        assert new_access
        assert new_access != expired
        assert response.cookies.get("refreshToken") is None

        db_client.cookies.clear()
        response = db_client.get("/api/v1/auth/me", headers=_cookies(new_access))
        assert response.status_code == 200

    def test_expired_access_token_without_refresh(self, db_client):
        account = _register_and_verify(db_client)
        expired = _expired_access_token(TokenPayload(user_id=account["id"], role_id=2))

        response = db_client.get("/api/v1/auth/me", headers=_cookies(expired))

        assert response.status_code == 401
        assert response.json()["error"] == "Token has expired"

    def test_malformed_access_token_is_not_refreshed(self, db_client):
        _register_and_verify(db_client)
        tokens = _login(db_client).json()

        response = db_client.get(
            "/api/v1/auth/me",
            headers=_cookies(tokens["access_token"] + "x", tokens["refresh_token"]),
        )

        assert response.status_code == 401
        assert response.cookies.get("accessToken") is None

    def test_superseded_refresh_token_is_rejected(self, db_client):
        account = _register_and_verify(db_client)
        first = _login(db_client).json()
        second = _login(db_client).json()
        expired = _expired_access_token(TokenPayload(user_id=account["id"], role_id=2))

        response = db_client.get(
            "/api/v1/auth/me", headers=_cookies(expired, first["refresh_token"])
        )
        assert response.status_code == 401

        response = db_client.get(
            "/api/v1/auth/me", headers=_cookies(expired, second["refresh_token"])
        )
        assert response.status_code == 200

    def test_deactivated_account_is_not_renewed(self, db_client, test_session_maker):
        account = _register_and_verify(db_client)
        tokens = _login(db_client).json()
        _update_account(test_session_maker, account["id"], is_active=False)
        expired = _expired_access_token(TokenPayload(user_id=account["id"], role_id=2))

        response = db_client.get(
            "/api/v1/auth/me", headers=_cookies(expired, tokens["refresh_token"])
        )
        assert response.status_code == 401
        assert response.cookies.get("accessToken") is None

        response = db_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert response.status_code == 401

    def test_rotation_invalidates_previous_refresh_token(self, db_client):
        _register_and_verify(db_client)
        tokens = _login(db_client).json()

        rotated = db_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        db_client.cookies.clear()
        assert rotated.status_code == 200

        replay = db_client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert replay.status_code == 401

    def test_logout_ends_refresh(self, db_client):
        account = _register_and_verify(db_client)
        tokens = _login(db_client).json()

        response = db_client.post(
            "/api/v1/auth/logout", headers=_cookies(tokens["access_token"])
        )
        db_client.cookies.clear()
        assert response.status_code == 200

        expired = _expired_access_token(TokenPayload(user_id=account["id"], role_id=2))
        response = db_client.get(
            "/api/v1/auth/me", headers=_cookies(expired, tokens["refresh_token"])
        )
        assert response.status_code == 401


class TestRoleGateFlow:
    """Test admin gating with real tokens."""

    @pytest.mark.parametrize("role_id, expected", [(1, 200), (2, 403)])
    def test_roles_endpoint(self, db_client, test_session_maker, role_id, expected):
        account = _register_and_verify(db_client)
        _update_account(test_session_maker, account["id"], role_id=role_id)

        tokens = _login(db_client).json()
        response = db_client.get("/api/v1/roles/", headers=_cookies(tokens["access_token"]))

        assert response.status_code == expected
