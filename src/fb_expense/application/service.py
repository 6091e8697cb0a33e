"""ExpenseApplicationService — owner-scoped expense CRUD.

Lookups are always filtered by the caller's user id, so another user's
expense is reported as 404 exactly like a missing one.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_category.domain.repository import CategoryRepositoryProtocol
from src.fb_category.infrastructure.persistence import CategoryRepository
from src.fb_common.errors import CategoryReferenceError, ExpenseNotFoundError
from src.fb_common.money import quantize_money
from src.fb_expense.application.schemas import ExpenseResponse
from src.fb_expense.domain.repository import ExpenseRepositoryProtocol
from src.fb_expense.infrastructure.persistence import ExpenseRepository

logger = logging.getLogger(__name__)


class ExpenseApplicationService:
    def __init__(
        self,
        repo: ExpenseRepositoryProtocol | None = None,
        category_repo: CategoryRepositoryProtocol | None = None,
    ) -> None:
        self._repo: ExpenseRepositoryProtocol = repo or ExpenseRepository()
        self._category_repo: CategoryRepositoryProtocol = category_repo or CategoryRepository()

    async def list_expenses(self, db: AsyncSession, user_id: str) -> list[ExpenseResponse]:
        expenses = await self._repo.list_by_user(db, user_id)
        return [ExpenseResponse.from_domain(e) for e in expenses]

    async def create_expense(
        self,
        db: AsyncSession,
        user_id: str,
        category_id: int | None,
        title: str,
        amount: Decimal,
        spent_on: date,
    ) -> ExpenseResponse:
        try:
            if category_id is not None and not await self._category_repo.exists(db, category_id):
                raise CategoryReferenceError()
            expense = await self._repo.create(
                db, user_id, category_id, title, quantize_money(amount), spent_on
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Expense created: id=%s user=%s", expense.id, user_id)
        return ExpenseResponse.from_domain(expense)

    async def get_expense(
        self, db: AsyncSession, user_id: str, expense_id: int
    ) -> ExpenseResponse:
        expense = await self._repo.get_for_user(db, user_id, expense_id)
        if expense is None:
            raise ExpenseNotFoundError(expense_id)
        return ExpenseResponse.from_domain(expense)

    async def update_expense(
        self,
        db: AsyncSession,
        user_id: str,
        expense_id: int,
        fields: dict[str, Any],
    ) -> ExpenseResponse:
        """Apply only the provided fields; create-time rules are not re-checked."""
        try:
            if await self._repo.get_for_user(db, user_id, expense_id) is None:
                raise ExpenseNotFoundError(expense_id)
            expense = await self._repo.update_fields(db, user_id, expense_id, fields)
            if expense is None:
                raise ExpenseNotFoundError(expense_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ExpenseResponse.from_domain(expense)

    async def delete_expense(self, db: AsyncSession, user_id: str, expense_id: int) -> None:
        try:
            if not await self._repo.delete_for_user(db, user_id, expense_id):
                raise ExpenseNotFoundError(expense_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Expense deleted: id=%s user=%s", expense_id, user_id)
