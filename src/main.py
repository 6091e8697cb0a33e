"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.fb_budget.api.router import router as budget_router
from src.fb_category.api.router import router as category_router
from src.fb_common.database import engine, ping_database
from src.fb_common.errors import AppError, HttpError, RequestValidationFailedError
from src.fb_common.redis_client import close_redis, ping_redis
from src.fb_common.response import error_response
from src.fb_expense.api.router import router as expense_router
from src.fb_gateway.api.router import router as auth_router
from src.fb_gateway.middleware.rate_limit import RateLimitMiddleware
from src.fb_gateway.middleware.request_log import RequestLogMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB (+ Redis when used) connections. Shutdown: dispose."""
    await ping_database()
    if settings.CACHE_BACKEND == "redis":
        await ping_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# Last added runs first: requests are logged (with request_id) before rate limiting
app.add_middleware(RateLimitMiddleware, enabled=settings.RATE_LIMIT_ENABLED)
app.add_middleware(RequestLogMiddleware)


def _render(
    request: Request, exc: AppError, headers: dict[str, str] | None = None
) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.details, request=request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _render(request, exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _render(request, RequestValidationFailedError.from_pydantic(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """401 from the bearer scheme, 404/405 from routing."""
    err = HttpError(exc.status_code, str(exc.detail), exc.headers)
    return _render(request, err, err.headers)


app.include_router(auth_router, prefix="/api/v1")
app.include_router(budget_router, prefix="/api/v1")
app.include_router(category_router, prefix="/api/v1")
app.include_router(expense_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
