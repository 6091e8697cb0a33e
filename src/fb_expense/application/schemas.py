"""Pydantic schemas for fb_expense API.

Create and update bodies deliberately differ: the create body carries the
full rule set (title length, required fields), while the update body only
coerces types. Both trim surrounding whitespace from strings. Update does not
re-run the create-time rules; the table constraints are the only guard on
updated values.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.fb_common.money import MAX_AMOUNT, Money
from src.fb_expense.domain.models import TITLE_MAX_LENGTH, Expense


class ExpenseCreateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category_id: int | None = None
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    amount: Decimal = Field(..., ge=-MAX_AMOUNT, le=MAX_AMOUNT)
    date: dt.date


class ExpenseUpdateRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    category_id: int | None = None
    title: str | None = None
    amount: Decimal | None = None
    date: dt.date | None = None


class ExpenseResponse(BaseModel):
    id: int
    user_id: str
    category_id: int | None
    title: str
    amount: Money
    date: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, e: Expense) -> "ExpenseResponse":
        return cls(
            id=e.id,
            user_id=e.user_id,
            category_id=e.category_id,
            title=e.title,
            amount=e.amount,
            date=e.date.isoformat(),
            created_at=e.created_at.isoformat(),
            updated_at=e.updated_at.isoformat(),
        )
