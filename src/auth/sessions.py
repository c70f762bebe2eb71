"""Session token lifecycle.

Tokens are 160 bits of randomness, base32-encoded for the cookie. Only the
SHA-256 digest of a token is stored, as the session's primary key.

Sessions last ``SESSION_LIFETIME_DAYS``. A session validated after the
midpoint of its lifetime is pushed forward by a full lifetime (sliding
window), so active users stay signed in while renewals write at most once
per half-lifetime. Concurrent renewals of one session are harmless: every
renewal moves the expiry forward.
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.constants import SESSION_LIFETIME_DAYS, SESSION_RENEWAL_THRESHOLD_DAYS
from src.models.base import utcnow
from src.models.session import Session
from src.models.user import User
from src.utils.logging import get_logger

logger = get_logger(__name__)

SESSION_LIFETIME = timedelta(days=SESSION_LIFETIME_DAYS)
SESSION_RENEWAL_THRESHOLD = timedelta(days=SESSION_RENEWAL_THRESHOLD_DAYS)


@dataclass
class SessionValidationResult:
    """Outcome of validating a session token."""

    session: Session | None = None
    user: User | None = None
    renewed: bool = False

    @property
    def is_valid(self) -> bool:
        return self.session is not None and self.user is not None


def generate_session_token() -> str:
    """Generate a new session token (lowercase base32, no padding)."""
    raw = secrets.token_bytes(20)
    return base64.b32encode(raw).decode("ascii").lower().rstrip("=")


def session_id_from_token(token: str) -> str:
    """Derive the stored session id from a token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def create_session(db: AsyncSession, token: str, user_id: str) -> Session:
    """Persist a new session for ``user_id`` keyed by the token's digest."""
    session = Session(
        id=session_id_from_token(token),
        user_id=user_id,
        expires_at=utcnow() + SESSION_LIFETIME,
    )
    db.add(session)
    await db.flush()
    return session


async def validate_session_token(db: AsyncSession, token: str) -> SessionValidationResult:
    """Resolve a token to its session and user.

    Unknown and expired tokens yield an empty result rather than an error;
    expired rows are deleted on the way out.
    """
    session_id = session_id_from_token(token)
    session = await db.get(Session, session_id)
    if session is None:
        return SessionValidationResult()

    now = utcnow()
    if now >= session.expires_at_utc:
        await db.delete(session)
        await db.flush()
        logger.debug(f"Deleted expired session for user {session.user_id}")
        return SessionValidationResult()

    user = await db.get(User, session.user_id)
    if user is None:
        # Owner vanished (e.g. admin reset racing this request)
        await db.delete(session)
        await db.flush()
        return SessionValidationResult()

    renewed = False
    if now >= session.expires_at_utc - SESSION_RENEWAL_THRESHOLD:
        session.expires_at = now + SESSION_LIFETIME
        await db.flush()
        renewed = True

    return SessionValidationResult(session=session, user=user, renewed=renewed)


async def invalidate_session(db: AsyncSession, session_id: str) -> None:
    """Delete one session (logout)."""
    await db.execute(delete(Session).where(Session.id == session_id))


async def invalidate_user_sessions(db: AsyncSession, user_id: str) -> None:
    """Delete every session a user holds (sign out everywhere)."""
    await db.execute(delete(Session).where(Session.user_id == user_id))
