"""Shared persistent httpx client for GitHub calls.

Both github.com (OAuth token exchange) and api.github.com go through the same
pooled client so connections are reused across requests.
"""

import httpx

from greensquares.constants import HTTPX_TIMEOUT

_POOL_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
    keepalive_expiry=30,
)

_github_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """Get the persistent httpx client for GitHub calls.

    Also used as a FastAPI dependency so tests can swap in a mock transport.
    """
    global _github_client
    if _github_client is None:
        _github_client = httpx.AsyncClient(
            timeout=HTTPX_TIMEOUT,
            limits=_POOL_LIMITS,
        )
    return _github_client


async def close_all_clients() -> None:
    """Close the persistent httpx client. Call during app shutdown."""
    global _github_client
    if _github_client is not None:
        await _github_client.aclose()
        _github_client = None
