"""CRUD operations for posts."""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.constants import POSTS_PAGE_SIZE
from src.models.base import utcnow
from src.models.comment import Comment, Like
from src.models.post import Post


async def get_post_by_slug(db: AsyncSession, slug: str) -> Post | None:
    """Get a post by its unique slug."""
    result = await db.execute(select(Post).where(Post.slug == slug))
    return result.scalar_one_or_none()


async def get_post(db: AsyncSession, post_id: str) -> Post | None:
    """Get a post by id."""
    return await db.get(Post, post_id)


async def upsert_post(
    db: AsyncSession,
    post_id: str,
    title: str,
    slug: str,
    content: str,
    published_at: datetime | None,
    updated_at: datetime,
) -> tuple[Post, bool]:
    """Insert the post, or overwrite every editable field if the id exists.

    ``created_at`` is only written on insert.

    Returns:
        Tuple of (post, created)
    """
    post = await db.get(Post, post_id)
    created = post is None

    if post is None:
        post = Post(id=post_id, created_at=utcnow())
        db.add(post)

    post.title = title
    post.slug = slug
    post.content = content
    post.published_at = published_at
    post.updated_at = updated_at

    await db.flush()
    return post, created


async def list_published_posts(db: AsyncSession, limit: int = POSTS_PAGE_SIZE) -> Sequence[Post]:
    """Latest published posts, newest first."""
    result = await db.execute(
        select(Post)
        .where(Post.published_at.is_not(None))
        .order_by(Post.published_at.desc())
        .limit(limit)
    )
    return result.scalars().all()


async def set_post_published(db: AsyncSession, post: Post, published: bool) -> Post:
    """Publish now, or revert to draft."""
    post.published_at = utcnow() if published else None
    await db.flush()
    return post


async def delete_post(db: AsyncSession, post: Post) -> None:
    """Delete a post with its comments and their likes."""
    comment_ids = select(Comment.id).where(Comment.post_id == post.id)
    await db.execute(delete(Like).where(Like.comment_id.in_(comment_ids)))
    await db.execute(delete(Comment).where(Comment.post_id == post.id))
    await db.delete(post)
    await db.flush()
