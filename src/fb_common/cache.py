"""Read-through / write-invalidate cache used for the shared category table.

Two interchangeable backends sit behind ``CacheProtocol``:

- ``RedisCache``: values JSON-encoded under ``settings.CACHE_KEY_PREFIX``,
  expiry handled by Redis (``SET ... EX ttl``).
- ``InMemoryCache``: per-process dict of ``key -> (expires_at, value)``.

Only JSON-compatible values (dicts, lists, str, numbers) may be cached.
There is no single-flight guard: two concurrent misses may both run the
loader and both store. Entries are re-derivations of database state so the
last writer wins harmlessly.
"""

import copy
import json
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import redis.asyncio as aioredis

from config.settings import settings
from src.fb_common.redis_client import get_redis

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[Any]]


class CacheProtocol(Protocol):
    async def get(self, key: str, loader: Loader, ttl: int) -> Any: ...

    async def invalidate(self, key: str) -> None: ...


class InMemoryCache:
    """Single-process cache with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, tuple[float, Any]] = {}
        self._clock = clock

    async def get(self, key: str, loader: Loader, ttl: int) -> Any:
        entry = self._entries.get(key)
        if entry is not None:
            expires_at, value = entry
            if self._clock() < expires_at:
                logger.debug("cache hit: %s", key)
                return copy.deepcopy(value)
            del self._entries[key]

        logger.debug("cache miss: %s", key)
        value = await loader()
        self._entries[key] = (self._clock() + ttl, copy.deepcopy(value))
        return value

    async def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class RedisCache:
    def __init__(self, redis: aioredis.Redis, prefix: str = "") -> None:
        self._redis = redis
        self._prefix = prefix

    async def get(self, key: str, loader: Loader, ttl: int) -> Any:
        full_key = self._prefix + key
        raw = await self._redis.get(full_key)
        if raw is not None:
            logger.debug("cache hit: %s", full_key)
            return json.loads(raw)

        logger.debug("cache miss: %s", full_key)
        value = await loader()
        await self._redis.set(full_key, json.dumps(value), ex=ttl)
        return value

    async def invalidate(self, key: str) -> None:
        await self._redis.delete(self._prefix + key)


_memory_cache = InMemoryCache()


async def get_category_cache() -> CacheProtocol:
    """FastAPI dependency: the backend selected by ``settings.CACHE_BACKEND``."""
    if settings.CACHE_BACKEND == "memory":
        return _memory_cache
    return RedisCache(await get_redis(), settings.CACHE_KEY_PREFIX)
