"""Integration tests for budgets, categories and expenses against PostgreSQL.

Run: FB_INTEGRATION=1 pytest tests/integration/test_bookkeeping_flow.py -v
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _unique_name(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class TestBudgetFlow:
    async def test_create_list_delete(self, client: AsyncClient, user_headers) -> None:
        created = await client.post("/api/v1/budgets", json={"limit": 500}, headers=user_headers)
        assert created.status_code == 201
        budget_id = created.json()["data"]["id"]

        listed = (await client.get("/api/v1/budgets", headers=user_headers)).json()["data"]
        assert [b["limit"] for b in listed] == [500.0]

        deleted = await client.delete(f"/api/v1/budgets/{budget_id}", headers=user_headers)
        assert deleted.status_code == 200
        assert (await client.get("/api/v1/budgets", headers=user_headers)).json()["data"] == []

    async def test_limit_stored_with_two_decimals(self, client, user_headers) -> None:
        created = await client.post(
            "/api/v1/budgets", json={"limit": "10.005"}, headers=user_headers
        )
        assert created.json()["data"]["limit"] == 10.01


class TestCategoryFlow:
    async def test_duplicate_name_rejected(self, client: AsyncClient, user_headers) -> None:
        name = _unique_name("Food")
        first = await client.post("/api/v1/categories", json={"name": name}, headers=user_headers)
        second = await client.post("/api/v1/categories", json={"name": name}, headers=user_headers)

        assert first.status_code == 201
        assert second.status_code == 422
        names = [
            c["name"]
            for c in (await client.get("/api/v1/categories", headers=user_headers)).json()["data"]
        ]
        assert names.count(name) == 1

    async def test_rename_visible_after_cached_read(self, client, user_headers) -> None:
        created = (
            await client.post(
                "/api/v1/categories", json={"name": _unique_name("Rent")}, headers=user_headers
            )
        ).json()["data"]
        url = f"/api/v1/categories/{created['id']}"
        await client.get(url, headers=user_headers)

        new_name = _unique_name("Housing")
        await client.put(url, json={"name": new_name}, headers=user_headers)

        assert (await client.get(url, headers=user_headers)).json()["data"]["name"] == new_name


class TestExpenseFlow:
    async def test_deleting_category_nulls_expense_reference(
        self, client: AsyncClient, user_headers
    ) -> None:
        category = (
            await client.post(
                "/api/v1/categories", json={"name": _unique_name("Bills")}, headers=user_headers
            )
        ).json()["data"]
        expense = (
            await client.post(
                "/api/v1/expenses",
                json={
                    "category_id": category["id"],
                    "title": "Power",
                    "amount": 80.1,
                    "date": "2024-04-02",
                },
                headers=user_headers,
            )
        ).json()["data"]

        await client.delete(f"/api/v1/categories/{category['id']}", headers=user_headers)

        resp = await client.get(f"/api/v1/expenses/{expense['id']}", headers=user_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["category_id"] is None

    async def test_partial_update(self, client: AsyncClient, user_headers) -> None:
        expense = (
            await client.post(
                "/api/v1/expenses",
                json={"title": "Coffee", "amount": 3.5, "date": "2024-04-03"},
                headers=user_headers,
            )
        ).json()["data"]

        resp = await client.put(
            f"/api/v1/expenses/{expense['id']}", json={"title": "Espresso"}, headers=user_headers
        )

        data = resp.json()["data"]
        assert data["title"] == "Espresso"
        assert data["amount"] == 3.5
