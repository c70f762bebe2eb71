"""Tests for admin endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.crud import create_comment, set_vote
from src.models.comment import Comment, Like
from src.models.post import Post
from src.models.session import Session
from src.models.user import User


async def _count(db: AsyncSession, model) -> int:
    return await db.scalar(select(func.count()).select_from(model))


class TestResetUsers:
    """Tests for POST /api/admin/reset-users."""

    @pytest.mark.asyncio
    async def test_requires_session(self, client: AsyncClient):
        response = await client.post("/api/admin/reset-users")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin_forbidden(
        self, authenticated_client: AsyncClient, db_session: AsyncSession
    ):
        response = await authenticated_client.post("/api/admin/reset-users")

        assert response.status_code == 403
        assert response.json() == {"error": "Unauthorized"}
        assert await _count(db_session, User) == 1

    @pytest.mark.asyncio
    async def test_admin_resets_everything(
        self,
        admin_client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
    ):
        post = Post(title="Kept", slug="kept", content="Body")
        db_session.add(post)
        await db_session.flush()
        comment = await create_comment(db_session, test_user.id, post.id, "Bye")
        await set_vote(db_session, test_user.id, comment.id, 1)
        await db_session.commit()

        response = await admin_client.post("/api/admin/reset-users")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["message"]
        assert "Max-Age=0" in response.headers["set-cookie"]
        for model in (User, Session, Comment, Like):
            assert await _count(db_session, model) == 0
        assert await _count(db_session, Post) == 1
