"""BudgetRepository — concrete implementation of BudgetRepositoryProtocol.

All queries use raw text() SQL. "limit" is a reserved word in PostgreSQL, so
the column is always quoted and selected as ``limit_amount``.

Transaction ownership: the application service commits or rolls back.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_budget.domain.models import Budget
from src.fb_common.errors import InternalError

_COLUMNS = 'id, user_id, "limit" AS limit_amount, created_at, updated_at'

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM budgets
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY id
""")

_GET_BY_ID_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM budgets
    WHERE id = :budget_id
""")

_INSERT_SQL = text(f"""
    INSERT INTO budgets (user_id, "limit")
    VALUES (CAST(:user_id AS UUID), :limit)
    RETURNING {_COLUMNS}
""")

_UPDATE_LIMIT_SQL = text(f"""
    UPDATE budgets
    SET "limit" = :limit
    WHERE id = :budget_id
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text("""
    DELETE FROM budgets
    WHERE id = :budget_id
    RETURNING id
""")


def _row_to_budget(row: object) -> Budget:
    return Budget(
        id=row.id,  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        limit=row.limit_amount,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class BudgetRepository:
    async def list_by_user(self, db: AsyncSession, user_id: str) -> list[Budget]:
        result = await db.execute(_LIST_BY_USER_SQL, {"user_id": user_id})
        return [_row_to_budget(row) for row in result.fetchall()]

    async def get_by_id(self, db: AsyncSession, budget_id: int) -> Budget | None:
        result = await db.execute(_GET_BY_ID_SQL, {"budget_id": budget_id})
        row = result.fetchone()
        return _row_to_budget(row) if row else None

    async def create(self, db: AsyncSession, user_id: str, limit: Decimal) -> Budget:
        result = await db.execute(_INSERT_SQL, {"user_id": user_id, "limit": limit})
        row = result.fetchone()
        if row is None:
            raise InternalError("budgets insert returned no rows")
        return _row_to_budget(row)

    async def update_limit(
        self, db: AsyncSession, budget_id: int, limit: Decimal
    ) -> Budget | None:
        result = await db.execute(
            _UPDATE_LIMIT_SQL, {"budget_id": budget_id, "limit": limit}
        )
        row = result.fetchone()
        return _row_to_budget(row) if row else None

    async def delete(self, db: AsyncSession, budget_id: int) -> bool:
        result = await db.execute(_DELETE_SQL, {"budget_id": budget_id})
        return result.fetchone() is not None
