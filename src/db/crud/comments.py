"""CRUD operations for comments and likes."""

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.comment import Comment, Like


async def get_comment(db: AsyncSession, comment_id: str) -> Comment | None:
    """Get a comment by id."""
    return await db.get(Comment, comment_id)


async def list_comments(db: AsyncSession, post_id: str) -> Sequence[tuple[Comment, int]]:
    """Comments on a post, oldest first, each with its summed like score."""
    scores = (
        select(Like.comment_id, func.sum(Like.value).label("score"))
        .group_by(Like.comment_id)
        .subquery()
    )
    result = await db.execute(
        select(Comment, func.coalesce(scores.c.score, 0))
        .outerjoin(scores, scores.c.comment_id == Comment.id)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc())
    )
    return [(comment, int(total)) for comment, total in result.all()]


async def create_comment(
    db: AsyncSession,
    user_id: str,
    post_id: str,
    content: str,
    parent_id: str | None = None,
) -> Comment:
    """Add a comment or reply."""
    comment = Comment(user_id=user_id, post_id=post_id, content=content, parent_id=parent_id)
    db.add(comment)
    await db.flush()
    await db.refresh(comment, ["user"])
    return comment


async def set_vote(db: AsyncSession, user_id: str, comment_id: str, value: int) -> int:
    """Record a user's vote on a comment, replacing any earlier vote.

    Returns:
        The comment's new total score
    """
    result = await db.execute(
        select(Like).where(Like.user_id == user_id, Like.comment_id == comment_id)
    )
    like = result.scalar_one_or_none()
    if like is None:
        db.add(Like(user_id=user_id, comment_id=comment_id, value=value))
    else:
        like.value = value
    await db.flush()

    total = await db.scalar(
        select(func.coalesce(func.sum(Like.value), 0)).where(Like.comment_id == comment_id)
    )
    return int(total or 0)
