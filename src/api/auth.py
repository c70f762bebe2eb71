"""OAuth login, callback and logout endpoints."""

import secrets
import traceback
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.cookies import (
    delete_session_cookie,
    safe_redirect_target,
    set_handshake_cookie,
    set_session_cookie,
)
from src.auth.linking import link_provider_identity
from src.auth.oauth import IdentityProvider, get_provider
from src.auth.sessions import (
    create_session,
    generate_session_token,
    invalidate_session,
    invalidate_user_sessions,
    session_id_from_token,
    validate_session_token,
)
from src.config import get_settings
from src.constants import LOGIN_REDIRECT_COOKIE_NAME, SESSION_COOKIE_NAME
from src.db import get_db
from src.errors import ProviderAlreadyLinked, ProviderNotConfigured
from src.utils.logging import LogContext, get_logger
from src.utils.metrics import metrics

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


def _require_provider(name: str) -> IdentityProvider:
    provider = get_provider(name)
    if provider is None:
        raise HTTPException(status_code=404, detail="Unknown provider")
    return provider


async def _signed_in_user_id(db: AsyncSession, request: Request) -> str | None:
    """User behind a valid session cookie sent along with the callback."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return None
    result = await validate_session_token(db, token)
    return result.user.id if result.is_valid else None


# ============== Login ==============

@router.get("/login/{provider_name}")
async def login(provider_name: str, redirect_to: str | None = None) -> RedirectResponse:
    """Initiate OAuth login (or account linking when already signed in)."""
    provider = _require_provider(provider_name)
    if not provider.is_configured():
        raise ProviderNotConfigured(provider.label)

    state = secrets.token_urlsafe(32)
    code_verifier = provider.generate_code_verifier()
    url = await provider.create_authorization_url(state, code_verifier)

    response = RedirectResponse(url=url, status_code=302)
    set_handshake_cookie(response, provider.state_cookie, state)
    if code_verifier:
        set_handshake_cookie(response, provider.verifier_cookie, code_verifier)
    set_handshake_cookie(response, LOGIN_REDIRECT_COOKIE_NAME, safe_redirect_target(redirect_to))
    return response


@router.get("/login/{provider_name}/callback", response_model=None)
async def login_callback(
    provider_name: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    code: str | None = None,
    state: str | None = None,
) -> Response:
    """Handle the provider redirect: verify state, resolve the user, start a session."""
    provider = _require_provider(provider_name)

    stored_state = request.cookies.get(provider.state_cookie)
    code_verifier = request.cookies.get(provider.verifier_cookie) if provider.uses_pkce else None
    if (
        not code
        or not state
        or not stored_state
        or not secrets.compare_digest(state, stored_state)
        or (provider.uses_pkce and not code_verifier)
    ):
        return Response(status_code=400)

    log = LogContext(logger, provider=provider.name)
    try:
        log.info("Validating authorization code...")
        access_token = await provider.exchange_code(code, code_verifier)

        log.info("Fetching user profile...")
        assertion = await provider.fetch_assertion(access_token)

        current_user_id = await _signed_in_user_id(db, request)
        outcome = await link_provider_identity(db, provider, assertion, current_user_id)

        log.info(f"Creating session, user_id: {outcome.user_id}")
        token = generate_session_token()
        session = await create_session(db, token, outcome.user_id)
        await db.commit()
    except ProviderAlreadyLinked as e:
        await db.rollback()
        metrics.oauth_logins_total.inc(provider=provider.name, action="conflict")
        return JSONResponse({"error": e.message}, status_code=400)
    except Exception as e:
        await db.rollback()
        log.exception("Login callback failed")
        metrics.oauth_logins_total.inc(provider=provider.name, action="error")
        body: dict[str, str] = {"error": str(e)}
        if settings.expose_error_details:
            body["stack"] = traceback.format_exc()
        return JSONResponse(body, status_code=500)

    metrics.oauth_logins_total.inc(provider=provider.name, action=outcome.action.value)

    target = safe_redirect_target(request.cookies.get(LOGIN_REDIRECT_COOKIE_NAME))
    response = RedirectResponse(url=target, status_code=302)
    set_session_cookie(response, token, session.expires_at_utc)
    for cookie in (LOGIN_REDIRECT_COOKIE_NAME, provider.state_cookie, provider.verifier_cookie):
        response.delete_cookie(cookie, path="/")
    return response


# ============== Logout ==============

@router.api_route("/logout", methods=["GET", "POST"])
async def logout(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    everywhere: bool = False,
) -> RedirectResponse:
    """Log out; ``?everywhere=true`` ends every session of the user."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        if everywhere:
            result = await validate_session_token(db, token)
            if result.is_valid:
                await invalidate_user_sessions(db, result.user.id)
        else:
            await invalidate_session(db, session_id_from_token(token))
        await db.commit()

    response = RedirectResponse(url="/", status_code=302)
    delete_session_cookie(response)
    return response
