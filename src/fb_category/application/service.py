"""CategoryApplicationService — global category CRUD behind a read-through cache.

Cache keys (ttl = settings.CATEGORY_CACHE_TTL, 3600s by default):
  - "categories"          — the full list
  - "category_{id}"       — a single category

Reads go through the cache. Every write commits first and then invalidates
the affected keys before returning, so the next read in any request reloads
from the database. A loader that raises (unknown id) stores nothing.

Categories are shared by all users; there is no ownership check here.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.fb_category.application.schemas import CategoryResponse
from src.fb_category.domain.models import categories_cache_key, category_cache_key
from src.fb_category.domain.repository import CategoryRepositoryProtocol
from src.fb_category.infrastructure.persistence import CategoryRepository
from src.fb_common.cache import CacheProtocol
from src.fb_common.errors import CategoryNameTakenError, CategoryNotFoundError

logger = logging.getLogger(__name__)


class CategoryApplicationService:
    def __init__(
        self,
        cache: CacheProtocol,
        repo: CategoryRepositoryProtocol | None = None,
        ttl: int | None = None,
    ) -> None:
        self._cache = cache
        self._repo: CategoryRepositoryProtocol = repo or CategoryRepository()
        self._ttl = ttl if ttl is not None else settings.CATEGORY_CACHE_TTL

    async def list_categories(self, db: AsyncSession) -> list[CategoryResponse]:
        async def load() -> list[dict]:
            categories = await self._repo.list_all(db)
            return [CategoryResponse.from_domain(c).model_dump(mode="json") for c in categories]

        cached = await self._cache.get(categories_cache_key(), load, self._ttl)
        return [CategoryResponse.model_validate(item) for item in cached]

    async def get_category(self, db: AsyncSession, category_id: int) -> CategoryResponse:
        async def load() -> dict:
            category = await self._repo.get_by_id(db, category_id)
            if category is None:
                raise CategoryNotFoundError(category_id)
            return CategoryResponse.from_domain(category).model_dump(mode="json")

        cached = await self._cache.get(category_cache_key(category_id), load, self._ttl)
        return CategoryResponse.model_validate(cached)

    async def create_category(self, db: AsyncSession, name: str) -> CategoryResponse:
        try:
            if await self._repo.name_taken(db, name):
                raise CategoryNameTakenError()
            category = await self._repo.create(db, name)
            await db.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent insert of the same name
            await db.rollback()
            raise CategoryNameTakenError() from exc
        except Exception:
            await db.rollback()
            raise

        await self._cache.invalidate(categories_cache_key())
        logger.info("Category created: id=%s name=%r", category.id, name)
        return CategoryResponse.from_domain(category)

    async def update_category(
        self, db: AsyncSession, category_id: int, name: str
    ) -> CategoryResponse:
        try:
            if await self._repo.name_taken(db, name, exclude_id=category_id):
                raise CategoryNameTakenError()
            category = await self._repo.rename(db, category_id, name)
            if category is None:
                raise CategoryNotFoundError(category_id)
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise CategoryNameTakenError() from exc
        except Exception:
            await db.rollback()
            raise

        await self._invalidate(category_id)
        logger.info("Category renamed: id=%s name=%r", category_id, name)
        return CategoryResponse.from_domain(category)

    async def delete_category(self, db: AsyncSession, category_id: int) -> None:
        try:
            if not await self._repo.delete(db, category_id):
                raise CategoryNotFoundError(category_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await self._invalidate(category_id)
        logger.info("Category deleted: id=%s", category_id)

    async def _invalidate(self, category_id: int) -> None:
        await self._cache.invalidate(categories_cache_key())
        await self._cache.invalidate(category_cache_key(category_id))
