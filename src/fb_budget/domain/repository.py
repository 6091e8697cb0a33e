"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_budget.domain.models import Budget


class BudgetRepositoryProtocol(Protocol):
    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Budget]: ...

    async def get_by_id(self, db: AsyncSession, budget_id: int) -> Budget | None: ...

    async def create(self, db: AsyncSession, user_id: str, limit: Decimal) -> Budget: ...

    async def update_limit(
        self, db: AsyncSession, budget_id: int, limit: Decimal
    ) -> Budget | None: ...

    async def delete(self, db: AsyncSession, budget_id: int) -> bool: ...
