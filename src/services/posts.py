"""Best-effort mirroring of post writes into the cache and the search index.

The relational row is the source of truth and is committed before anything
here runs. Each mirror write is isolated: its failure is logged and counted,
never raised, and never affects the other mirror.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.post import Post
from src.models.schemas import PostRead
from src.services.search import EmbeddingService, VectorIndex
from src.utils.cache import cache, post_cache_key
from src.utils.metrics import metrics

logger = logging.getLogger(__name__)


async def cache_post(post: PostRead) -> bool:
    """Write the serialized post under ``post:<slug>``."""
    try:
        written = await cache.set(post_cache_key(post.slug), post.to_json())
    except Exception:
        logger.exception(f"KV cache update failed for post {post.id}")
        written = False
    else:
        if not written:
            logger.error(f"KV cache update skipped for post {post.id} (cache unavailable)")

    metrics.cache_writes_total.inc(status="ok" if written else "error")
    return written


async def index_post(db: AsyncSession, post: PostRead) -> bool:
    """Embed the post and upsert it into the vector index."""
    try:
        text = EmbeddingService.create_post_text(post.title, post.content)
        vector = await EmbeddingService.generate_embedding_async(text)
        await VectorIndex(db).upsert(post.id, vector, {"title": post.title, "slug": post.slug})
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(f"AI indexing failed for post {post.id}")
        metrics.index_writes_total.inc(status="error")
        return False

    metrics.index_writes_total.inc(status="ok")
    return True


async def write_through(db: AsyncSession, post: Post) -> tuple[bool, bool]:
    """Mirror a committed post into the cache and the index concurrently.

    Returns:
        Tuple of (cached, indexed)
    """
    snapshot = PostRead.model_validate(post)
    cached, indexed = await asyncio.gather(
        cache_post(snapshot),
        index_post(db, snapshot),
    )
    return cached, indexed


async def evict_post(slug: str) -> None:
    """Drop a post's cache entry."""
    if not await cache.delete(post_cache_key(slug)):
        logger.warning(f"Cache invalidation skipped for post:{slug}")


async def unindex_post(db: AsyncSession, post_id: str) -> None:
    """Remove a post from the vector index."""
    try:
        await VectorIndex(db).delete(post_id)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception(f"Failed to remove post {post_id} from the index")
