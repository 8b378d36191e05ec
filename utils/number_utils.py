"""Numeric helpers for provider payloads."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


def parse_rate(value: Optional[object]) -> float:
    """Parse a provider rate string such as "1,234.56".

    Blank or missing values become 0.0; anything else that is not a number
    raises ValueError.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).replace(",", "").strip()
    if not text:
        return 0.0
    return float(text)


def round_half_up(value: float, places: int = 2) -> float:
    """Round like a cashier (2.345 -> 2.35), not like banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
