"""Per-group rate limiting middleware.

Rules (requests per minute per client):
  - /api/v1/expenses:   100
  - /api/v1/categories:  60
  - /api/v1/budgets:     30

Fixed one-minute windows counted with Redis INCR + EXPIRE:

    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, 60)
    if count > limit:
        -> 429

Key pattern: "ratelimit:{client}:{group}". The client is the bearer token
subject when the token verifies, otherwise the caller IP (first
X-Forwarded-For hop when behind a proxy). Unauthenticated requests to a
limited group are counted too, keyed by IP, so token guessing is throttled
alongside normal traffic. Paths outside every group are not limited.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

import redis.asyncio as aioredis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.fb_common.errors import RateLimitError
from src.fb_common.redis_client import get_redis
from src.fb_common.response import error_response
from src.fb_gateway.auth.jwt_handler import peek_subject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    group: str
    path_prefix: str
    limit: int
    window_seconds: int = 60

    def matches(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")


def default_rules() -> list[RateLimitRule]:
    return [
        RateLimitRule("expenses", "/api/v1/expenses", settings.RATE_LIMIT_EXPENSES),
        RateLimitRule("categories", "/api/v1/categories", settings.RATE_LIMIT_CATEGORIES),
        RateLimitRule("budgets", "/api/v1/budgets", settings.RATE_LIMIT_BUDGETS),
    ]


class RateCounterProtocol(Protocol):
    async def hit(self, key: str, window_seconds: int) -> int:
        """Count one request against ``key``; return the count in the current window."""
        ...


class RedisRateCounter:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def hit(self, key: str, window_seconds: int) -> int:
        count = int(await self._redis.incr(key))
        if count == 1:
            await self._redis.expire(key, window_seconds)
        return count


class InMemoryRateCounter:
    """Single-process counter; each key holds (window_end, count).

    Ended windows are swept at most once per ``sweep_interval`` seconds, so a
    key that stops sending is dropped within one interval of its window end.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 60.0,
    ) -> None:
        self._windows: dict[str, tuple[float, int]] = {}
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def __len__(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        ended = [key for key, (window_end, _) in self._windows.items() if now >= window_end]
        for key in ended:
            del self._windows[key]
        self._next_sweep = now + self._sweep_interval

    def clear(self) -> None:
        self._windows.clear()

    async def hit(self, key: str, window_seconds: int) -> int:
        now = self._clock()
        if now >= self._next_sweep:
            self._sweep(now)
        window_end, count = self._windows.get(key, (0.0, 0))
        if now >= window_end:
            window_end, count = now + window_seconds, 0
        count += 1
        self._windows[key] = (window_end, count)
        return count


_memory_counter = InMemoryRateCounter()


async def get_rate_counter() -> RateCounterProtocol:
    """Counter backend follows ``settings.CACHE_BACKEND``."""
    if settings.CACHE_BACKEND == "memory":
        return _memory_counter
    return RedisRateCounter(await get_redis())


def client_identity(request: Request) -> str:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        subject = peek_subject(token.strip())
        if subject:
            return f"user:{subject}"

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{request.client.host if request.client else 'unknown'}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        rules: list[RateLimitRule] | None = None,
        counter_factory: Callable[[], Awaitable[RateCounterProtocol]] = get_rate_counter,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self._rules = rules if rules is not None else default_rules()
        self._counter_factory = counter_factory
        self._enabled = enabled

    def _match(self, path: str) -> RateLimitRule | None:
        for rule in self._rules:
            if rule.matches(path):
                return rule
        return None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rule = self._match(request.url.path)
        if not self._enabled or rule is None:
            return await call_next(request)

        identity = client_identity(request)
        counter = await self._counter_factory()
        count = await counter.hit(f"ratelimit:{identity}:{rule.group}", rule.window_seconds)

        if count > rule.limit:
            logger.warning(
                "Rate limit exceeded: group=%s client=%s count=%d limit=%d",
                rule.group, identity, count, rule.limit,
            )
            err = RateLimitError(retry_after=rule.window_seconds)
            resp = error_response(err.code, err.message, request=request)
            return JSONResponse(
                status_code=err.http_status,
                content=resp.model_dump(),
                headers={
                    "Retry-After": str(err.retry_after),
                    "X-RateLimit-Limit": str(rule.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rule.limit)
        response.headers["X-RateLimit-Remaining"] = str(rule.limit - count)
        return response
