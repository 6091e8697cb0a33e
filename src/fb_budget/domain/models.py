"""Domain models for fb_budget — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Budget:
    id: int
    user_id: str
    limit: Decimal
    created_at: datetime
    updated_at: datetime

    def is_owned_by(self, user_id: str) -> bool:
        """Authorization policy for view/update/delete: owner only."""
        return self.user_id == user_id
