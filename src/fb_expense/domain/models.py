"""Domain models for fb_expense — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

TITLE_MAX_LENGTH = 255

# Columns a partial update may touch
UPDATABLE_FIELDS = ("category_id", "title", "amount", "date")


@dataclass
class Expense:
    id: int
    user_id: str
    category_id: int | None
    title: str
    amount: Decimal
    date: date
    created_at: datetime
    updated_at: datetime
