"""Integration-test fixtures (PostgreSQL + Redis required).

Skipped unless FB_INTEGRATION=1. Pre-condition: databases up and
``alembic upgrade head`` applied.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os
import uuid
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app

_HERE = Path(__file__).parent


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("FB_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set FB_INTEGRATION=1 with PostgreSQL + Redis running")
    for item in items:
        if _HERE in item.path.parents:
            item.add_marker(skip)


def _unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"fbuser_{uid}",
        "email": f"fb_{uid}@example.com",
        "password": "TestPass1",
    }


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def user_headers(client: AsyncClient) -> dict[str, str]:
    """Register + log in a fresh user; return its Authorization header."""
    user = _unique_user()
    reg_resp = await client.post("/api/v1/auth/register", json=user)
    assert reg_resp.status_code == 201, reg_resp.text
    login_resp = await client.post("/api/v1/auth/login", json={
        "username": user["username"],
        "password": user["password"],
    })
    token = login_resp.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
