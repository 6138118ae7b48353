"""Auth cookie helpers."""

from typing import Optional

from fastapi import Request, Response

from app.core.auth.entities import TokenPair
from app.settings import Settings, get_settings


def _cookie_policy(settings: Settings) -> dict:
    """Return secure/samesite flags for auth cookies."""
    if settings.is_production:
        return {"httponly": True, "secure": True, "samesite": "strict"}
    return {"httponly": True, "secure": False, "samesite": "lax"}


def set_access_cookie(
    response: Response, access_token: str, settings: Optional[Settings] = None
) -> None:
    settings = settings or get_settings()
    response.set_cookie(
        key=settings.access_cookie_name,
        value=access_token,
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
        **_cookie_policy(settings),
    )


def set_auth_cookies(
    response: Response, token_pair: TokenPair, settings: Optional[Settings] = None
) -> None:
    """Set both access and refresh cookies from a freshly issued pair."""
    settings = settings or get_settings()
    set_access_cookie(response, token_pair.access_token, settings)
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=token_pair.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        path="/",
        **_cookie_policy(settings),
    )


def clear_auth_cookies(response: Response, settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    policy = _cookie_policy(settings)
    for key in (settings.access_cookie_name, settings.refresh_cookie_name):
        response.delete_cookie(
            key=key,
            path="/",
            secure=policy["secure"],
            httponly=policy["httponly"],
            samesite=policy["samesite"],
        )


def read_access_token(request: Request, settings: Optional[Settings] = None) -> Optional[str]:
    """Read the access token from its cookie, falling back to a Bearer header."""
    settings = settings or get_settings()
    token = request.cookies.get(settings.access_cookie_name)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def read_refresh_token(request: Request, settings: Optional[Settings] = None) -> Optional[str]:
    settings = settings or get_settings()
    return request.cookies.get(settings.refresh_cookie_name) or None
