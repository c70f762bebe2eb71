"""Semantic search over posts."""

from src.services.search.embeddings import EmbeddingService, EmbeddingUnavailable
from src.services.search.index import VectorIndex

__all__ = ["EmbeddingService", "EmbeddingUnavailable", "VectorIndex"]
