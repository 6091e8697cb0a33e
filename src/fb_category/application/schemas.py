"""Pydantic schemas for fb_category API.

CategoryResponse doubles as the cached representation: the cache stores
``model_dump(mode="json")`` and reads back through ``model_validate``.
"""

from pydantic import BaseModel, ConfigDict, Field

from src.fb_category.domain.models import NAME_MAX_LENGTH, Category


class CategoryRequest(BaseModel):
    """Surrounding whitespace is dropped before the length and uniqueness rules run."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)


class CategoryResponse(BaseModel):
    id: int
    name: str
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, c: Category) -> "CategoryResponse":
        return cls(
            id=c.id,
            name=c.name,
            created_at=c.created_at.isoformat(),
            updated_at=c.updated_at.isoformat(),
        )
