"""Embedding service for semantic post search."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from src.config import get_settings
from src.constants import EMBED_CONTENT_MAX_CHARS

logger = logging.getLogger(__name__)

# Thread pool for CPU-intensive embedding operations
# This prevents blocking the asyncio event loop
_embedding_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="embedding")

# Lazy load sentence-transformers to avoid startup time impact
_model = None


class EmbeddingUnavailable(RuntimeError):
    """The embedding model could not be loaded."""


def _get_model():
    """Lazy load the sentence transformer model."""
    global _model
    if _model is None:
        model_name = get_settings().embedding_model
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            logger.error("sentence-transformers not installed. Run: pip install -e '.[ml]'")
            raise EmbeddingUnavailable("sentence-transformers is not installed") from e

        logger.info(f"Loading sentence-transformers model ({model_name})...")
        _model = SentenceTransformer(model_name)
        logger.info("Model loaded successfully")
    return _model


class EmbeddingService:
    """Turns post text into normalized vectors.

    Vectors are L2-normalized, so cosine similarity is a plain dot product.
    """

    @staticmethod
    def create_post_text(title: str, content: str) -> str:
        """Text representation of a post: title plus the start of the body."""
        return f"{title}\n{content[:EMBED_CONTENT_MAX_CHARS]}"

    @classmethod
    def generate_embedding(cls, text: str) -> list[float]:
        """Generate embedding for a single text (sync version)."""
        model = _get_model()
        embedding = model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
        return embedding.tolist()

    @classmethod
    async def generate_embedding_async(cls, text: str) -> list[float]:
        """Generate embedding for a single text (async version).

        Runs in thread pool to avoid blocking the event loop.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(_embedding_executor, cls.generate_embedding, text)

    @classmethod
    def rank(
        cls,
        query_embedding: list[float],
        candidates: list[tuple[str, list[float]]],
        top_k: int,
    ) -> list[tuple[str, float]]:
        """Rank candidates by similarity to the query.

        Args:
            query_embedding: The embedding to compare against
            candidates: List of (id, embedding) tuples
            top_k: Number of results to return

        Returns:
            List of (id, score) tuples, best match first
        """
        if not candidates:
            return []

        ids = [item_id for item_id, _ in candidates]
        matrix = np.asarray([emb for _, emb in candidates], dtype=float)
        scores = matrix @ np.asarray(query_embedding, dtype=float)

        order = np.argsort(-scores)[:top_k]
        return [(ids[i], float(scores[i])) for i in order]
