"""Domain models for fb_category — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

NAME_MAX_LENGTH = 255


@dataclass
class Category:
    """Shared taxonomy entry; not owned by any user."""

    id: int
    name: str
    created_at: datetime
    updated_at: datetime


def categories_cache_key() -> str:
    return "categories"


def category_cache_key(category_id: int) -> str:
    return f"category_{category_id}"
