"""Repository Protocol — dependency inversion for testability.

Every lookup is scoped by owner: an expense belonging to another user is
indistinguishable from a missing one.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_expense.domain.models import Expense


class ExpenseRepositoryProtocol(Protocol):
    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Expense]: ...

    async def get_for_user(
        self, db: AsyncSession, user_id: str, expense_id: int
    ) -> Expense | None: ...

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        category_id: int | None,
        title: str,
        amount: Decimal,
        spent_on: date,
    ) -> Expense: ...

    async def update_fields(
        self,
        db: AsyncSession,
        user_id: str,
        expense_id: int,
        fields: dict[str, Any],
    ) -> Expense | None: ...

    async def delete_for_user(
        self, db: AsyncSession, user_id: str, expense_id: int
    ) -> bool: ...
