"""Authentication dependencies for FastAPI.

Two ways to identify a caller exist, tried in this order:

1. The ``session`` cookie, validated against the sessions table.
2. A user id header injected by a trusted gateway (an authenticating
   reverse proxy in front of the admin dashboard). It is only honored when
   ``GATEWAY_SECRET`` is configured and the request carries the same secret,
   so browsers cannot forge it.

Endpoints that need a real ``User`` row (comments, profile, admin) only
accept the session. Content endpoints (posts, music) accept either, via
``require_caller_id``.
"""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.cookies import set_session_cookie
from src.auth.sessions import SessionValidationResult, validate_session_token
from src.config import get_settings
from src.constants import GATEWAY_SECRET_HEADER, SESSION_COOKIE_NAME
from src.db import get_db
from src.models.user import User


async def get_session_result(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionValidationResult:
    """Validate the session cookie, re-issuing it when the session was renewed."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return SessionValidationResult()

    result = await validate_session_token(db, token)
    if result.renewed and result.session is not None:
        set_session_cookie(response, token, result.session.expires_at_utc)
    return result


async def get_optional_user(
    result: Annotated[SessionValidationResult, Depends(get_session_result)],
) -> User | None:
    """Get current user from the session cookie if logged in."""
    return result.user if result.is_valid else None


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Get current user, raising 401 if not authenticated."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user, raising 403 unless they hold the admin role."""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    return user


def gateway_identity(request: Request) -> str | None:
    """User id asserted by the trusted gateway, if the request proves it came through it."""
    settings = get_settings()
    if not settings.gateway_secret:
        return None

    presented = request.headers.get(GATEWAY_SECRET_HEADER, "")
    if not secrets.compare_digest(presented.encode(), settings.gateway_secret.encode()):
        return None

    user_id = request.headers.get(settings.gateway_user_header, "").strip()
    return user_id or None


async def resolve_caller_identity(
    request: Request,
    user: Annotated[User | None, Depends(get_optional_user)],
) -> str | None:
    """Identify the caller: session cookie first, then the trusted gateway."""
    if user is not None:
        return user.id
    return gateway_identity(request)


async def require_caller_id(
    caller_id: Annotated[str | None, Depends(resolve_caller_identity)],
) -> str:
    """Caller id, raising 401 if neither identity source is present."""
    if not caller_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return caller_id
