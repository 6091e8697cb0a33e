"""Shared Redis connection for the category cache and rate-limit counters.

Nothing in Redis is authoritative: cached categories are re-derived from
PostgreSQL on a miss and rate counters simply restart when lost. With
``CACHE_BACKEND=memory`` no connection is ever opened.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the process-wide client, connecting lazily on first use."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=30,
        )
    return _client


async def ping_redis() -> None:
    """Startup check: raises if Redis is unreachable."""
    client = await get_redis()
    await client.ping()
    logger.info("Redis reachable at %s", settings.REDIS_URL)


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
