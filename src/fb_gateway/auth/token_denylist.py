"""Revoked-token registry used by logout.

Entries are keyed by the token's ``jti`` and kept only until the token's own
``exp``; after that the signature check rejects the token anyway.

Redis key pattern: "{CACHE_KEY_PREFIX}revoked:{jti}" with EX = seconds left.
"""

import logging
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as aioredis

from config.settings import settings
from src.fb_common.redis_client import get_redis

logger = logging.getLogger(__name__)


class TokenDenylistProtocol(Protocol):
    async def revoke(self, jti: str, expires_at: int) -> None: ...

    async def is_revoked(self, jti: str) -> bool: ...


class InMemoryTokenDenylist:
    """Single-process denylist; ``expires_at`` is a unix timestamp."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._entries: dict[str, float] = {}
        self._clock = clock

    def _prune(self, now: float) -> None:
        expired = [jti for jti, exp in self._entries.items() if exp <= now]
        for jti in expired:
            del self._entries[jti]

    async def revoke(self, jti: str, expires_at: int) -> None:
        now = self._clock()
        self._prune(now)
        if expires_at > now:
            self._entries[jti] = float(expires_at)

    async def is_revoked(self, jti: str) -> bool:
        exp = self._entries.get(jti)
        return exp is not None and exp > self._clock()

    def clear(self) -> None:
        self._entries.clear()


class RedisTokenDenylist:
    def __init__(
        self,
        redis: aioredis.Redis,
        prefix: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = redis
        self._prefix = prefix
        self._clock = clock

    def _key(self, jti: str) -> str:
        return f"{self._prefix}revoked:{jti}"

    async def revoke(self, jti: str, expires_at: int) -> None:
        ttl = int(expires_at - self._clock())
        if ttl <= 0:
            return
        await self._redis.set(self._key(jti), "1", ex=ttl)
        logger.debug("token revoked: jti=%s ttl=%d", jti, ttl)

    async def is_revoked(self, jti: str) -> bool:
        return bool(await self._redis.exists(self._key(jti)))


_memory_denylist = InMemoryTokenDenylist()


async def get_token_denylist() -> TokenDenylistProtocol:
    """FastAPI dependency; the backend follows ``settings.CACHE_BACKEND``."""
    if settings.CACHE_BACKEND == "memory":
        return _memory_denylist
    return RedisTokenDenylist(await get_redis(), settings.CACHE_KEY_PREFIX)
