"""Shared persistent httpx client for outbound API calls.

Provider profile lookups happen on every login; reusing one pooled client
avoids a fresh TCP + TLS handshake per callback.
"""

import httpx

from src.constants import HTTPX_TIMEOUT

_POOL_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
    keepalive_expiry=30,
)

_general_client: httpx.AsyncClient | None = None


def get_general_client() -> httpx.AsyncClient:
    """Get the persistent httpx client (created on first use)."""
    global _general_client
    if _general_client is None:
        _general_client = httpx.AsyncClient(
            timeout=HTTPX_TIMEOUT,
            limits=_POOL_LIMITS,
            headers={"User-Agent": "gin-blog"},
        )
    return _general_client


async def close_all_clients() -> None:
    """Close the persistent client. Call during app shutdown."""
    global _general_client
    if _general_client is not None:
        await _general_client.aclose()
        _general_client = None
