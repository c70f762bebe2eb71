"""Tests for music endpoints."""

import pytest
from httpx import AsyncClient

from src.constants import GATEWAY_SECRET_HEADER

GATEWAY_HEADERS = {GATEWAY_SECRET_HEADER: "test-gateway-secret", "X-User-Id": "admin-dashboard"}


class TestMusic:
    """Tests for /api/music."""

    @pytest.mark.asyncio
    async def test_add_requires_caller_identity(self, client: AsyncClient):
        response = await client.post(
            "/api/music", data={"title": "Song", "artist": "Band", "url": "https://x.example.com"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_add_and_list(self, client: AsyncClient):
        first = await client.post(
            "/api/music",
            data={"title": "First", "artist": "Band", "url": "https://music.example.com/1"},
            headers=GATEWAY_HEADERS,
        )
        second = await client.post(
            "/api/music",
            data={
                "title": "Second",
                "artist": "Band",
                "url": "https://music.example.com/2",
                "cover": "https://img.example.com/2.jpg",
            },
            headers=GATEWAY_HEADERS,
        )

        assert first.status_code == 200
        assert second.json()["success"] is True

        response = await client.get("/api/music")

        tracks = response.json()
        assert [t["title"] for t in tracks] == ["Second", "First"]
        assert tracks[0]["cover"] == "https://img.example.com/2.jpg"
        assert tracks[1]["cover"] is None
        assert "createdAt" in tracks[0]

    @pytest.mark.asyncio
    async def test_add_via_session(self, authenticated_client: AsyncClient):
        response = await authenticated_client.post(
            "/api/music", data={"title": "Song", "artist": "Band", "url": "https://x.example.com"}
        )

        assert response.status_code == 200
