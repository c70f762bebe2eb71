"""Cookie helpers for the session and OAuth handshake cookies."""

from datetime import datetime

from fastapi import Response

from src.config import get_settings
from src.constants import OAUTH_COOKIE_MAX_AGE, SESSION_COOKIE_NAME


def set_session_cookie(response: Response, token: str, expires_at: datetime) -> None:
    """Set the session cookie to expire with the session itself."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=get_settings().is_production,
        expires=expires_at,
    )


def delete_session_cookie(response: Response) -> None:
    """Clear the session cookie."""
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")


def set_handshake_cookie(response: Response, key: str, value: str) -> None:
    """Set a short-lived cookie used between login start and callback."""
    response.set_cookie(
        key=key,
        value=value,
        path="/",
        httponly=True,
        samesite="lax",
        secure=get_settings().is_production,
        max_age=OAUTH_COOKIE_MAX_AGE,
    )


def safe_redirect_target(target: str | None) -> str:
    """Only follow same-site relative paths after login."""
    if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
        return "/"
    return target
