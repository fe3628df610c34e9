"""
Redis Connection

Lazily created async Redis client shared by the storage services
(drafts, AI result history).
"""

import logging

import redis.asyncio as redis

from ai_memo.core.config import settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Get or create the shared Redis client (also used as a FastAPI dependency)."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


async def check_redis() -> bool:
    """
    Verify Redis connectivity.

    Non-blocking check - application continues if Redis is unavailable,
    only draft and history storage are degraded.
    """
    try:
        await get_redis().ping()
        logger.info(f"Redis connection established ({settings.REDIS_HOST})")
        return True
    except Exception as e:
        logger.error(f"Redis connection error: {e}")
        return False


async def close_redis() -> None:
    """Close the shared client at application shutdown."""
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
