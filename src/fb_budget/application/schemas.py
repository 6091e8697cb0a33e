"""Pydantic schemas for fb_budget API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.fb_budget.domain.models import Budget
from src.fb_common.money import MAX_AMOUNT, Money


class BudgetRequest(BaseModel):
    """Body for both create and update: the limit is always required."""

    limit: Decimal = Field(..., ge=0, le=MAX_AMOUNT, description="Spending limit, >= 0")


class BudgetResponse(BaseModel):
    id: int
    user_id: str
    limit: Money
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, b: Budget) -> "BudgetResponse":
        return cls(
            id=b.id,
            user_id=b.user_id,
            limit=b.limit,
            created_at=b.created_at.isoformat(),
            updated_at=b.updated_at.isoformat(),
        )
