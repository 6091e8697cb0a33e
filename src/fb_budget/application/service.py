"""BudgetApplicationService — owner-scoped CRUD for budgets.

Reads run without an explicit transaction. Writes commit on success and roll
back on any failure. The caller's user id is always passed in explicitly.

Authorization: a budget that exists but belongs to someone else is reported
as 403 (BudgetAccessDeniedError); a missing id is 404. On update both checks
run before the body is validated, so a stranger sending a bad limit still
gets 403.
"""

import logging
from decimal import Decimal
from typing import Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_budget.application.schemas import BudgetRequest, BudgetResponse
from src.fb_budget.domain.models import Budget
from src.fb_budget.domain.repository import BudgetRepositoryProtocol
from src.fb_budget.infrastructure.persistence import BudgetRepository
from src.fb_common.errors import (
    BudgetAccessDeniedError,
    BudgetNotFoundError,
    RequestValidationFailedError,
)
from src.fb_common.money import quantize_money

logger = logging.getLogger(__name__)


def _parse_limit(payload: Any) -> Decimal:
    try:
        return BudgetRequest.model_validate(payload).limit
    except ValidationError as exc:
        raise RequestValidationFailedError.from_pydantic(exc.errors()) from None


class BudgetApplicationService:
    def __init__(self, repo: BudgetRepositoryProtocol | None = None) -> None:
        self._repo: BudgetRepositoryProtocol = repo or BudgetRepository()

    async def _get_authorized(
        self, db: AsyncSession, user_id: str, budget_id: int
    ) -> Budget:
        budget = await self._repo.get_by_id(db, budget_id)
        if budget is None:
            raise BudgetNotFoundError(budget_id)
        if not budget.is_owned_by(user_id):
            raise BudgetAccessDeniedError()
        return budget

    async def list_budgets(self, db: AsyncSession, user_id: str) -> list[BudgetResponse]:
        budgets = await self._repo.list_by_user(db, user_id)
        return [BudgetResponse.from_domain(b) for b in budgets]

    async def create_budget(
        self, db: AsyncSession, user_id: str, limit: Decimal
    ) -> BudgetResponse:
        try:
            budget = await self._repo.create(db, user_id, quantize_money(limit))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Budget created: id=%s user=%s", budget.id, user_id)
        return BudgetResponse.from_domain(budget)

    async def get_budget(
        self, db: AsyncSession, user_id: str, budget_id: int
    ) -> BudgetResponse:
        budget = await self._get_authorized(db, user_id, budget_id)
        return BudgetResponse.from_domain(budget)

    async def update_budget(
        self, db: AsyncSession, user_id: str, budget_id: int, payload: Any
    ) -> BudgetResponse:
        """``payload`` is the raw JSON body; it is validated after authorization."""
        try:
            await self._get_authorized(db, user_id, budget_id)
            limit = _parse_limit(payload)
            updated = await self._repo.update_limit(db, budget_id, quantize_money(limit))
            if updated is None:
                # deleted by a concurrent request after the ownership check
                raise BudgetNotFoundError(budget_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return BudgetResponse.from_domain(updated)

    async def delete_budget(self, db: AsyncSession, user_id: str, budget_id: int) -> None:
        try:
            await self._get_authorized(db, user_id, budget_id)
            await self._repo.delete(db, budget_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Budget deleted: id=%s user=%s", budget_id, user_id)
