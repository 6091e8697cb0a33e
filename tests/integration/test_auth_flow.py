"""Integration tests for auth flow (requires running PG + Redis).

Run: FB_INTEGRATION=1 pytest tests/integration/test_auth_flow.py -v
"""

import uuid

import pytest
from httpx import AsyncClient

# All tests in this module share the session-scoped event loop so that the
# module-level SQLAlchemy async engine pool stays alive across tests.
pytestmark = pytest.mark.asyncio(loop_scope="session")


def unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"authuser_{uid}",
        "email": f"auth_{uid}@example.com",
        "password": "TestPass1",
    }


async def _login(client: AsyncClient, user: dict[str, str]) -> dict:
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": user["username"], "password": user["password"]},
    )
    return resp.json()["data"]


class TestRegister:
    async def test_register_success(self, client: AsyncClient) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/auth/register", json=user)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["username"] == user["username"]
        assert "user_id" in body["data"]

    async def test_register_duplicate_username(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/register",
            json={**user, "email": "someone_else@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_register_duplicate_email(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        other = unique_user()
        resp = await client.post(
            "/api/v1/auth/register", json={**other, "email": user["email"]}
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1002


class TestLoginAndRefresh:
    async def test_login_then_profile(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        tokens = await _login(client, user)

        resp = await client.get(
            "/api/v1/auth/profile",
            headers={"Authorization": f"Bearer {tokens['access_token']}"},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["email"] == user["email"]

    async def test_login_wrong_password(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": user["username"], "password": "WrongPass1"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003

    async def test_refresh_issues_working_access_token(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        tokens = await _login(client, user)

        resp = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert resp.status_code == 200
        access = resp.json()["data"]["access_token"]
        profile = await client.get(
            "/api/v1/auth/profile", headers={"Authorization": f"Bearer {access}"}
        )
        assert profile.status_code == 200

    async def test_refresh_token_rejected_as_bearer(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        tokens = await _login(client, user)

        resp = await client.get(
            "/api/v1/budgets",
            headers={"Authorization": f"Bearer {tokens['refresh_token']}"},
        )
        assert resp.status_code == 401


class TestLogout:
    async def test_logout_revokes_both_tokens(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        tokens = await _login(client, user)
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}

        resp = await client.post(
            "/api/v1/auth/logout",
            json={"refresh_token": tokens["refresh_token"]},
            headers=headers,
        )
        assert resp.status_code == 200

        assert (await client.get("/api/v1/auth/user", headers=headers)).status_code == 401
        refreshed = await client.post(
            "/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
        )
        assert refreshed.status_code == 401
