"""Money type shared by budgets and expenses.

Amounts are NUMERIC(12, 2) in PostgreSQL and Decimal in Python; they leave the
API as JSON numbers so clients never have to parse strings.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from pydantic import PlainSerializer

_CENT = Decimal("0.01")

# Largest value NUMERIC(12, 2) can hold
MAX_AMOUNT = Decimal("9999999999.99")

Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


def quantize_money(value: Decimal) -> Decimal:
    """Round to whole cents the way NUMERIC(12, 2) stores it: 10.005 -> 10.01."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)
