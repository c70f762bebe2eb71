"""Tests for semantic search."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.post import PostEmbedding
from src.services.search import EmbeddingService, EmbeddingUnavailable


async def _index(db: AsyncSession, slug: str, vector: list[float]) -> None:
    db.add(PostEmbedding(post_id=f"id-{slug}", vector=vector, meta={"title": slug.title(), "slug": slug}))
    await db.commit()


class TestSearchEndpoint:
    """Tests for GET /api/search."""

    @pytest.mark.asyncio
    async def test_short_query_returns_nothing(self, client: AsyncClient, mock_embeddings):
        for query in ("", "a", " a "):
            response = await client.get("/api/search", params={"q": query})

            assert response.status_code == 200
            assert response.json() == []
        mock_embeddings.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_query(self, client: AsyncClient):
        response = await client.get("/api/search")

        assert response.json() == []

    @pytest.mark.asyncio
    async def test_results_ranked_by_similarity(
        self, client: AsyncClient, db_session: AsyncSession, mock_embeddings
    ):
        # Query vector is [1, 0, 0]
        await _index(db_session, "unrelated", [0.0, 1.0, 0.0])
        await _index(db_session, "exact", [1.0, 0.0, 0.0])
        await _index(db_session, "partial", [0.6, 0.8, 0.0])

        response = await client.get("/api/search", params={"q": "goroutines"})

        assert response.status_code == 200
        hits = response.json()
        assert [hit["metadata"]["slug"] for hit in hits] == ["exact", "partial", "unrelated"]
        assert hits[0] == {"score": pytest.approx(1.0), "metadata": {"title": "Exact", "slug": "exact"}}
        assert hits[1]["score"] == pytest.approx(0.6)
        mock_embeddings.assert_awaited_once_with("goroutines")

    @pytest.mark.asyncio
    async def test_top_five(self, client: AsyncClient, db_session: AsyncSession):
        for i in range(8):
            await _index(db_session, f"post-{i}", [1.0 - i / 10, 0.0, 0.0])

        response = await client.get("/api/search", params={"q": "anything"})

        assert [hit["metadata"]["slug"] for hit in response.json()] == [
            f"post-{i}" for i in range(5)
        ]

    @pytest.mark.asyncio
    async def test_empty_index(self, client: AsyncClient):
        response = await client.get("/api/search", params={"q": "anything"})

        assert response.json() == []

    @pytest.mark.asyncio
    async def test_embeddings_unavailable(self, client: AsyncClient, mock_embeddings):
        mock_embeddings.side_effect = EmbeddingUnavailable("sentence-transformers is not installed")

        response = await client.get("/api/search", params={"q": "anything"})

        assert response.status_code == 503
        assert response.json() == {"error": "Search is unavailable"}


class TestEmbeddingService:
    """Tests for embedding helpers."""

    def test_post_text_truncates_content(self):
        text = EmbeddingService.create_post_text("Title", "x" * 5000)

        assert text == "Title\n" + "x" * 1000

    def test_rank(self):
        ranked = EmbeddingService.rank(
            [0.0, 1.0],
            [("a", [1.0, 0.0]), ("b", [0.0, 1.0]), ("c", [0.7, 0.7])],
            top_k=2,
        )

        assert [item_id for item_id, _ in ranked] == ["b", "c"]
        assert ranked[0][1] == pytest.approx(1.0)

    def test_rank_no_candidates(self):
        assert EmbeddingService.rank([1.0], [], top_k=5) == []
