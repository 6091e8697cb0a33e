"""ExpenseRepository — concrete implementation of ExpenseRepositoryProtocol.

All queries use raw text() SQL and filter on user_id alongside id.
The partial update builds its SET clause from UPDATABLE_FIELDS only, so
column names never come from request input.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_common.errors import InternalError
from src.fb_expense.domain.models import UPDATABLE_FIELDS, Expense

_COLUMNS = "id, user_id, category_id, title, amount, date, created_at, updated_at"

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM expenses
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY id
""")

_GET_FOR_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM expenses
    WHERE id = :expense_id AND user_id = CAST(:user_id AS UUID)
""")

_INSERT_SQL = text(f"""
    INSERT INTO expenses (user_id, category_id, title, amount, date)
    VALUES (CAST(:user_id AS UUID), :category_id, :title, :amount, :date)
    RETURNING {_COLUMNS}
""")

_DELETE_FOR_USER_SQL = text("""
    DELETE FROM expenses
    WHERE id = :expense_id AND user_id = CAST(:user_id AS UUID)
    RETURNING id
""")


def _row_to_expense(row: object) -> Expense:
    return Expense(
        id=row.id,  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        category_id=row.category_id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class ExpenseRepository:
    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Expense]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id})
        return [_row_to_expense(row) for row in result.fetchall()]

    async def get_for_user(
        self, db: AsyncSession, user_id: str, expense_id: int
    ) -> Expense | None:
        result = await db.execute(
            _GET_FOR_USER_SQL, {"user_id": user_id, "expense_id": expense_id}
        )
        row = result.fetchone()
        return _row_to_expense(row) if row else None

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        category_id: int | None,
        title: str,
        amount: Decimal,
        spent_on: date,
    ) -> Expense:
        result = await db.execute(
            _INSERT_SQL,
            {
                "user_id": user_id,
                "category_id": category_id,
                "title": title,
                "amount": amount,
                "date": spent_on,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("expenses insert returned no rows")
        return _row_to_expense(row)

    async def update_fields(
        self,
        db: AsyncSession,
        user_id: str,
        expense_id: int,
        fields: dict[str, Any],
    ) -> Expense | None:
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not changes:
            return await self.get_for_user(db, user_id, expense_id)

        assignments = ", ".join(f"{column} = :{column}" for column in changes)
        stmt = text(f"""
            UPDATE expenses
            SET {assignments}
            WHERE id = :expense_id AND user_id = CAST(:user_id AS UUID)
            RETURNING {_COLUMNS}
        """)
        result = await db.execute(
            stmt, {**changes, "expense_id": expense_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_expense(row) if row else None

    async def delete_for_user(
        self, db: AsyncSession, user_id: str, expense_id: int
    ) -> bool:
        result = await db.execute(
            _DELETE_FOR_USER_SQL, {"user_id": user_id, "expense_id": expense_id}
        )
        return result.fetchone() is not None
