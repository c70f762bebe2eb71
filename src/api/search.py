"""Semantic search endpoint."""

from typing import Annotated

from fastapi import Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.constants import SEARCH_MIN_LENGTH, SEARCH_TOP_K
from src.db import get_db
from src.services.search import EmbeddingService, EmbeddingUnavailable, VectorIndex
from src.utils.logging import get_logger

logger = get_logger(__name__)


async def search_posts(
    db: Annotated[AsyncSession, Depends(get_db)],
    q: Annotated[str, Query()] = "",
) -> list[dict]:
    """Posts closest in meaning to the query, best match first."""
    query = q.strip()
    if len(query) < SEARCH_MIN_LENGTH:
        return []

    try:
        vector = await EmbeddingService.generate_embedding_async(query)
    except EmbeddingUnavailable:
        raise HTTPException(status_code=503, detail="Search is unavailable") from None

    hits = await VectorIndex(db).query(vector, top_k=SEARCH_TOP_K)
    logger.debug(f"Search '{query}' returned {len(hits)} hits")
    return [hit.model_dump() for hit in hits]
