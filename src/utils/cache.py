"""Redis key-value cache for serialized posts.

The cache is never the source of truth: every method degrades to a miss or
a no-op when Redis is down, and reports that through its return value.
"""

import json
from datetime import timedelta
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.config import get_settings
from src.constants import CACHE_TTL_POST, POST_CACHE_PREFIX
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

DEFAULT_TTL = timedelta(seconds=CACHE_TTL_POST)


def post_cache_key(slug: str) -> str:
    """Cache key for a post, e.g. ``post:hello-world``."""
    return f"{POST_CACHE_PREFIX}{slug}"


class RedisCache:
    """Async Redis cache client with JSON serialization."""

    def __init__(self) -> None:
        self._client: redis.Redis | None = None
        self._connected = False

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                str(settings.redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def connect(self) -> bool:
        """Test Redis connection."""
        try:
            await self._get_client().ping()
            self._connected = True
        except RedisError as e:
            logger.warning(f"Redis cache unavailable: {e}")
            self._connected = False
        return self._connected

    async def ping(self) -> bool:
        """Ping Redis to check connection health."""
        return await self._get_client().ping()

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._connected = False

    async def get(self, key: str) -> Any | None:
        """Get a cached value, or None if missing, expired or unreachable."""
        if not self._connected:
            return None

        try:
            data = await self._get_client().get(key)
        except RedisError as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None
        return json.loads(data) if data else None

    async def set(self, key: str, value: Any, ttl: timedelta | None = None) -> bool:
        """Store a JSON-serializable value with a TTL (default 7 days).

        Returns:
            True if the value was written
        """
        if not self._connected:
            return False

        try:
            serialized = json.dumps(value, default=str)
            expire_seconds = int((ttl or DEFAULT_TTL).total_seconds())
            await self._get_client().setex(key, expire_seconds, serialized)
        except (RedisError, TypeError, ValueError) as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False
        return True

    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if the delete reached Redis
        """
        if not self._connected:
            return False

        try:
            await self._get_client().delete(key)
        except RedisError as e:
            logger.warning(f"Cache delete error for {key}: {e}")
            return False
        return True


# Global cache instance
cache = RedisCache()
