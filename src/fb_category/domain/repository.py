"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.fb_category.domain.models import Category


class CategoryRepositoryProtocol(Protocol):
    async def list_all(self, db: AsyncSession) -> list[Category]: ...

    async def get_by_id(self, db: AsyncSession, category_id: int) -> Category | None: ...

    async def exists(self, db: AsyncSession, category_id: int) -> bool: ...

    async def name_taken(
        self, db: AsyncSession, name: str, exclude_id: int | None = None
    ) -> bool: ...

    async def create(self, db: AsyncSession, name: str) -> Category: ...

    async def rename(
        self, db: AsyncSession, category_id: int, name: str
    ) -> Category | None: ...

    async def delete(self, db: AsyncSession, category_id: int) -> bool: ...
