"""User directory: lookups and writes keyed by provider identities."""

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.comment import Comment, Like
from src.models.session import Session
from src.models.user import User, new_user_id


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    """Get a user by primary key."""
    return await db.get(User, user_id)


async def get_user_by_provider_id(
    db: AsyncSession,
    id_field: str,
    external_id: str,
) -> User | None:
    """Get the user linked to a provider identity.

    ``id_field`` is the provider column name (e.g. ``"discord_id"``). The
    column is unique, so at most one row matches.
    """
    column = getattr(User, id_field)
    result = await db.execute(select(User).where(column == external_id))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    username: str,
    avatar: str | None = None,
    **provider_fields: Any,
) -> User:
    """Insert a new user and flush so uniqueness violations surface here."""
    user = User(id=new_user_id(), username=username, avatar=avatar, **provider_fields)
    db.add(user)
    await db.flush()
    return user


async def update_user_fields(db: AsyncSession, user: User, **fields: Any) -> User:
    """Overwrite the given columns on a user."""
    for name, value in fields.items():
        setattr(user, name, value)
    await db.flush()
    return user


async def delete_all_users(db: AsyncSession) -> None:
    """Delete every user along with the rows that reference them."""
    await db.execute(delete(Like))
    await db.execute(delete(Comment))
    await db.execute(delete(Session))
    await db.execute(delete(User))
