"""Post API endpoints."""

import uuid
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, Form, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import require_caller_id
from src.db import get_db
from src.db.crud import (
    delete_post,
    get_post,
    get_post_by_slug,
    list_published_posts,
    set_post_published,
    upsert_post,
)
from src.models.base import utcnow
from src.models.schemas import PostRead, PostStatusUpdate
from src.services.posts import evict_post, unindex_post, write_through
from src.utils.cache import cache, post_cache_key
from src.utils.logging import get_logger

logger = get_logger(__name__)


def _parse_timestamp(value: str | None, field: str) -> datetime | None:
    """Parse a ``datetime-local`` form value; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {field}") from None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


async def save_post(
    caller_id: Annotated[str, Depends(require_caller_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    title: Annotated[str, Form(min_length=1)],
    content: Annotated[str, Form(min_length=1)],
    slug: Annotated[str, Form(min_length=1)],
    post_id: Annotated[str | None, Form(alias="id")] = None,
    published_at: Annotated[str | None, Form(alias="publishedAt")] = None,
    updated_at: Annotated[str | None, Form(alias="updatedAt")] = None,
) -> dict:
    """Create a post, or overwrite it when ``id`` names an existing one.

    Without ``publishedAt`` the post is published now.
    """
    now = utcnow()
    post, created = None, False
    existing = await get_post(db, post_id) if post_id else None
    old_slug = existing.slug if existing else None
    try:
        post, created = await upsert_post(
            db,
            post_id=post_id or str(uuid.uuid4()),
            title=title,
            slug=slug,
            content=content,
            published_at=_parse_timestamp(published_at, "publishedAt") or now,
            updated_at=_parse_timestamp(updated_at, "updatedAt") or now,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Slug already in use") from None

    logger.info(f"{'Created' if created else 'Updated'} post {post.id} ({post.slug}) by {caller_id}")
    if old_slug and old_slug != post.slug:
        await evict_post(old_slug)
    await write_through(db, post)
    return {"success": True, "id": post.id}


async def list_posts(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[dict]:
    """Latest published posts, newest first."""
    posts = await list_published_posts(db)
    return [PostRead.model_validate(post).to_json() for post in posts]


async def read_post(
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get a post by slug, served from the cache when possible."""
    key = post_cache_key(slug)
    cached = await cache.get(key)
    if cached is not None:
        return cached

    post = await get_post_by_slug(db, slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Not found")

    data = PostRead.model_validate(post).to_json()
    await cache.set(key, data)
    return data


async def update_post_status(
    slug: str,
    data: PostStatusUpdate,
    caller_id: Annotated[str, Depends(require_caller_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Publish or unpublish a post."""
    post = await get_post_by_slug(db, slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Not found")

    await set_post_published(db, post, published=data.action == "publish")
    await db.commit()
    await evict_post(slug)

    logger.info(f"Post {post.id} {data.action}ed by {caller_id}")
    return {"success": True, "publishedAt": PostRead.model_validate(post).to_json()["publishedAt"]}


async def remove_post(
    slug: str,
    caller_id: Annotated[str, Depends(require_caller_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Delete a post, its comments, cache entry and index entry."""
    post = await get_post_by_slug(db, slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Not found")

    post_id = post.id
    await delete_post(db, post)
    await db.commit()
    await evict_post(slug)
    await unindex_post(db, post_id)

    logger.info(f"Post {post_id} deleted by {caller_id}")
    return {"success": True}
