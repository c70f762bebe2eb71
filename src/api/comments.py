"""Comment and like API endpoints."""

from typing import Annotated

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import get_current_user
from src.db import get_db
from src.db.crud import create_comment, get_comment, get_post_by_slug, list_comments, set_vote
from src.models.comment import Comment
from src.models.schemas import CommentCreate, CommentRead, LikeCreate
from src.models.user import User


def _serialize(comment: Comment, score: int = 0) -> dict:
    data = CommentRead.model_validate(comment).model_copy(
        update={"score": score}
    )
    return data.to_json()


async def get_post_comments(
    slug: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[dict]:
    """Comments on a post, oldest first, with their scores."""
    post = await get_post_by_slug(db, slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Not found")

    return [_serialize(comment, score) for comment, score in await list_comments(db, post.id)]


async def add_comment(
    slug: str,
    data: CommentCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Comment on a post, or reply to another comment on it."""
    post = await get_post_by_slug(db, slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Not found")

    if data.parent_id is not None:
        parent = await get_comment(db, data.parent_id)
        if parent is None or parent.post_id != post.id:
            raise HTTPException(status_code=400, detail="Invalid parent comment")

    comment = await create_comment(db, user.id, post.id, data.content, data.parent_id)
    await db.commit()
    return _serialize(comment)


async def like_comment(
    comment_id: str,
    data: LikeCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Up- or down-vote a comment; voting again replaces the earlier vote."""
    if await get_comment(db, comment_id) is None:
        raise HTTPException(status_code=404, detail="Not found")

    score = await set_vote(db, user.id, comment_id, data.value)
    await db.commit()
    return {"commentId": comment_id, "score": score}
