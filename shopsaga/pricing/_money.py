"""
Money helpers — coercion and final-step rounding.
"""

from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: object) -> Decimal | None:
    """
    Coerce a numeric input to Decimal.

    Returns None for anything that is not a finite number (bools included),
    so callers can apply their own "invalid input" rule.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # str() keeps 10.1 as 10.1 instead of its binary expansion
        return Decimal(str(value))
    return None


def round_money(value: Decimal) -> Decimal:
    """Quantise to cents, half-up. Only call this on a final result."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def as_whole(value: object) -> int | None:
    """Integer quantities; integral floats count, bools do not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    return None


__all__ = ("CENT", "ZERO", "to_decimal", "round_money", "as_whole")
