"""CategoryRepository — concrete implementation of CategoryRepositoryProtocol.

All queries use raw text() SQL.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_category.domain.models import Category
from src.fb_common.errors import InternalError

_LIST_ALL_SQL = text("""
    SELECT id, name, created_at, updated_at
    FROM categories
    ORDER BY id
""")

_GET_BY_ID_SQL = text("""
    SELECT id, name, created_at, updated_at
    FROM categories
    WHERE id = :category_id
""")

_EXISTS_SQL = text("""
    SELECT 1 FROM categories WHERE id = :category_id
""")

# Uniqueness check that optionally ignores one row (the row being renamed)
_NAME_TAKEN_SQL = text("""
    SELECT 1
    FROM categories
    WHERE name = :name
      AND (CAST(:exclude_id AS BIGINT) IS NULL OR id <> CAST(:exclude_id AS BIGINT))
    LIMIT 1
""")

_INSERT_SQL = text("""
    INSERT INTO categories (name)
    VALUES (:name)
    RETURNING id, name, created_at, updated_at
""")

_RENAME_SQL = text("""
    UPDATE categories
    SET name = :name
    WHERE id = :category_id
    RETURNING id, name, created_at, updated_at
""")

_DELETE_SQL = text("""
    DELETE FROM categories
    WHERE id = :category_id
    RETURNING id
""")


def _row_to_category(row: object) -> Category:
    return Category(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class CategoryRepository:
    async def list_all(self, db: AsyncSession) -> list[Category]:
        result = await db.execute(_LIST_ALL_SQL)
        return [_row_to_category(row) for row in result.fetchall()]

    async def get_by_id(self, db: AsyncSession, category_id: int) -> Category | None:
        result = await db.execute(_GET_BY_ID_SQL, {"category_id": category_id})
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def exists(self, db: AsyncSession, category_id: int) -> bool:
        result = await db.execute(_EXISTS_SQL, {"category_id": category_id})
        return result.fetchone() is not None

    async def name_taken(
        self, db: AsyncSession, name: str, exclude_id: int | None = None
    ) -> bool:
        result = await db.execute(
            _NAME_TAKEN_SQL, {"name": name, "exclude_id": exclude_id}
        )
        return result.fetchone() is not None

    async def create(self, db: AsyncSession, name: str) -> Category:
        result = await db.execute(_INSERT_SQL, {"name": name})
        row = result.fetchone()
        if row is None:
            raise InternalError("categories insert returned no rows")
        return _row_to_category(row)

    async def rename(
        self, db: AsyncSession, category_id: int, name: str
    ) -> Category | None:
        result = await db.execute(_RENAME_SQL, {"category_id": category_id, "name": name})
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def delete(self, db: AsyncSession, category_id: int) -> bool:
        result = await db.execute(_DELETE_SQL, {"category_id": category_id})
        return result.fetchone() is not None
