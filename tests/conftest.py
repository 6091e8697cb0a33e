"""Shared test fixtures.

Settings are read at import time, so the environment is prepared before
anything under ``src`` is imported. API tests run the real FastAPI app with
dependency overrides: in-memory repositories, an in-memory category cache
and token denylist, and an in-memory user store. The real bearer-token
dependency runs; tokens minted for ids that were never registered resolve to
a synthetic active user.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import itertools  # noqa: E402
import uuid  # noqa: E402
from collections.abc import AsyncGenerator, AsyncIterator, Callable  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402
from dataclasses import replace  # noqa: E402
from datetime import UTC, date, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.fb_budget.api.router import get_budget_service  # noqa: E402
from src.fb_budget.application.service import BudgetApplicationService  # noqa: E402
from src.fb_budget.domain.models import Budget  # noqa: E402
from src.fb_category.api.router import get_category_service  # noqa: E402
from src.fb_category.application.service import CategoryApplicationService  # noqa: E402
from src.fb_category.domain.models import Category  # noqa: E402
from src.fb_common.cache import InMemoryCache  # noqa: E402
from src.fb_common.database import get_db_session  # noqa: E402
from src.fb_common.errors import (  # noqa: E402
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.fb_expense.api.router import get_expense_service  # noqa: E402
from src.fb_expense.application.service import ExpenseApplicationService  # noqa: E402
from src.fb_expense.domain.models import UPDATABLE_FIELDS, Expense  # noqa: E402
from src.fb_gateway.api.router import get_user_service  # noqa: E402
from src.fb_gateway.auth.jwt_handler import (  # noqa: E402
    TokenPair,
    create_access_token,
    issue_token_pair,
)
from src.fb_gateway.auth.password import hash_password, verify_password  # noqa: E402
from src.fb_gateway.auth.token_denylist import (  # noqa: E402
    InMemoryTokenDenylist,
    get_token_denylist,
)
from src.fb_gateway.middleware.rate_limit import (  # noqa: E402
    InMemoryRateCounter,
    get_rate_counter,
)
from src.fb_gateway.user.db_models import UserModel  # noqa: E402
from src.fb_gateway.user.service import UserService  # noqa: E402
from src.main import app  # noqa: E402


def _now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# In-memory persistence
# ---------------------------------------------------------------------------


class FakeSession:
    """Stands in for AsyncSession.

    Resource services only commit and roll back; the auth dependency loads the
    caller with ``get``; the register route opens ``begin``.
    """

    def __init__(self, users: dict[uuid.UUID, UserModel]) -> None:
        self.commits = 0
        self.rollbacks = 0
        self._users = users

    @asynccontextmanager
    async def begin(self) -> AsyncIterator["FakeSession"]:
        yield self

    async def get(self, model: type, key: uuid.UUID) -> UserModel | None:
        user = self._users.get(key)
        if user is not None:
            return user
        synthetic = UserModel()
        synthetic.id = key
        synthetic.username = "tester"
        synthetic.email = "tester@example.com"
        synthetic.is_active = True
        return synthetic

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class InMemoryBudgetRepository:
    def __init__(self) -> None:
        self.rows: dict[int, Budget] = {}
        self._ids = itertools.count(1)

    async def list_by_user(self, db: Any, user_id: str) -> list[Budget]:
        return [replace(b) for _, b in sorted(self.rows.items()) if b.user_id == user_id]

    async def get_by_id(self, db: Any, budget_id: int) -> Budget | None:
        budget = self.rows.get(budget_id)
        return replace(budget) if budget else None

    async def create(self, db: Any, user_id: str, limit: Decimal) -> Budget:
        now = _now()
        budget = Budget(next(self._ids), user_id, limit, now, now)
        self.rows[budget.id] = budget
        return replace(budget)

    async def update_limit(self, db: Any, budget_id: int, limit: Decimal) -> Budget | None:
        budget = self.rows.get(budget_id)
        if budget is None:
            return None
        budget.limit = limit
        budget.updated_at = _now()
        return replace(budget)

    async def delete(self, db: Any, budget_id: int) -> bool:
        return self.rows.pop(budget_id, None) is not None


class InMemoryCategoryRepository:
    def __init__(self) -> None:
        self.rows: dict[int, Category] = {}
        self._ids = itertools.count(1)
        self.list_calls = 0
        self.get_calls = 0

    async def list_all(self, db: Any) -> list[Category]:
        self.list_calls += 1
        return [replace(c) for _, c in sorted(self.rows.items())]

    async def get_by_id(self, db: Any, category_id: int) -> Category | None:
        self.get_calls += 1
        category = self.rows.get(category_id)
        return replace(category) if category else None

    async def exists(self, db: Any, category_id: int) -> bool:
        return category_id in self.rows

    async def name_taken(self, db: Any, name: str, exclude_id: int | None = None) -> bool:
        return any(c.name == name and c.id != exclude_id for c in self.rows.values())

    async def create(self, db: Any, name: str) -> Category:
        now = _now()
        category = Category(next(self._ids), name, now, now)
        self.rows[category.id] = category
        return replace(category)

    async def rename(self, db: Any, category_id: int, name: str) -> Category | None:
        category = self.rows.get(category_id)
        if category is None:
            return None
        category.name = name
        category.updated_at = _now()
        return replace(category)

    async def delete(self, db: Any, category_id: int) -> bool:
        return self.rows.pop(category_id, None) is not None


class InMemoryExpenseRepository:
    def __init__(self) -> None:
        self.rows: dict[int, Expense] = {}
        self._ids = itertools.count(1)

    def _owned(self, user_id: str, expense_id: int) -> Expense | None:
        expense = self.rows.get(expense_id)
        if expense is None or expense.user_id != user_id:
            return None
        return expense

    async def list_by_user(self, db: Any, user_id: str) -> list[Expense]:
        return [replace(e) for _, e in sorted(self.rows.items()) if e.user_id == user_id]

    async def get_for_user(self, db: Any, user_id: str, expense_id: int) -> Expense | None:
        expense = self._owned(user_id, expense_id)
        return replace(expense) if expense else None

    async def create(
        self,
        db: Any,
        user_id: str,
        category_id: int | None,
        title: str,
        amount: Decimal,
        spent_on: date,
    ) -> Expense:
        now = _now()
        expense = Expense(
            next(self._ids), user_id, category_id, title, amount, spent_on, now, now
        )
        self.rows[expense.id] = expense
        return replace(expense)

    async def update_fields(
        self, db: Any, user_id: str, expense_id: int, fields: dict[str, Any]
    ) -> Expense | None:
        expense = self._owned(user_id, expense_id)
        if expense is None:
            return None
        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(expense, key, value)
        expense.updated_at = _now()
        return replace(expense)

    async def delete_for_user(self, db: Any, user_id: str, expense_id: int) -> bool:
        if self._owned(user_id, expense_id) is None:
            return False
        del self.rows[expense_id]
        return True


class InMemoryUserService(UserService):
    """UserService over a dict instead of the users table."""

    def __init__(self, users: dict[uuid.UUID, UserModel]) -> None:
        self.users = users

    async def register(self, username: str, email: str, password: str, db: Any) -> UserModel:
        if any(u.username == username for u in self.users.values()):
            raise UsernameExistsError()
        if any(u.email == email for u in self.users.values()):
            raise EmailExistsError()
        user = UserModel(
            username=username,
            email=email,
            password_hash=hash_password(password),
            is_active=True,
        )
        user.id = uuid.uuid4()
        user.created_at = _now()
        self.users[user.id] = user
        return user

    async def login(
        self, username: str, password: str, db: Any
    ) -> tuple[UserModel, TokenPair]:
        user = next((u for u in self.users.values() if u.username == username), None)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()
        return user, issue_token_pair(str(user.id))


class Repositories:
    def __init__(self) -> None:
        self.users: dict[uuid.UUID, UserModel] = {}
        self.budgets = InMemoryBudgetRepository()
        self.categories = InMemoryCategoryRepository()
        self.expenses = InMemoryExpenseRepository()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def repos() -> Repositories:
    return Repositories()


@pytest.fixture
def category_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def token_denylist() -> InMemoryTokenDenylist:
    return InMemoryTokenDenylist()


@pytest.fixture
def auth_headers() -> Callable[[], dict[str, str]]:
    """Factory: each call mints a bearer token for a brand-new user id."""

    def _make() -> dict[str, str]:
        token = create_access_token(str(uuid.uuid4()))
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
async def client(
    repos: Repositories,
    category_cache: InMemoryCache,
    token_denylist: InMemoryTokenDenylist,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the app, backed by in-memory state."""

    async def _fake_db_session() -> AsyncGenerator[FakeSession, None]:
        yield FakeSession(repos.users)

    counter = await get_rate_counter()
    if isinstance(counter, InMemoryRateCounter):
        counter.clear()

    app.dependency_overrides[get_db_session] = _fake_db_session
    app.dependency_overrides[get_token_denylist] = lambda: token_denylist
    app.dependency_overrides[get_user_service] = lambda: InMemoryUserService(repos.users)
    app.dependency_overrides[get_budget_service] = lambda: BudgetApplicationService(
        repo=repos.budgets
    )
    app.dependency_overrides[get_category_service] = lambda: CategoryApplicationService(
        category_cache, repo=repos.categories
    )
    app.dependency_overrides[get_expense_service] = lambda: ExpenseApplicationService(
        repo=repos.expenses, category_repo=repos.categories
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
