"""Vector index of post embeddings.

Entries live in the ``post_embeddings`` table and carry ``{title, slug}`` so
search results can link to posts without touching the posts table. Queries
are a brute-force dot product over every entry, which is plenty for a
personal blog's post count.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.post import PostEmbedding
from src.models.schemas import SearchHit, SearchMetadata
from src.services.search.embeddings import EmbeddingService


class VectorIndex:
    """Upsert, delete and query post vectors."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def upsert(self, post_id: str, vector: list[float], metadata: dict[str, str]) -> None:
        """Insert or replace the entry for ``post_id``."""
        entry = await self.db.get(PostEmbedding, post_id)
        if entry is None:
            entry = PostEmbedding(post_id=post_id)
            self.db.add(entry)
        entry.vector = vector
        entry.meta = metadata
        await self.db.flush()

    async def delete(self, post_id: str) -> None:
        """Remove the entry for ``post_id`` if present."""
        await self.db.execute(delete(PostEmbedding).where(PostEmbedding.post_id == post_id))

    async def query(self, vector: list[float], top_k: int) -> list[SearchHit]:
        """Closest entries to ``vector``, best first."""
        result = await self.db.execute(select(PostEmbedding))
        entries = {entry.post_id: entry for entry in result.scalars().all()}

        ranked = EmbeddingService.rank(
            vector,
            [(post_id, entry.vector) for post_id, entry in entries.items()],
            top_k=top_k,
        )
        return [
            SearchHit(score=score, metadata=SearchMetadata(**entries[post_id].meta))
            for post_id, score in ranked
        ]
