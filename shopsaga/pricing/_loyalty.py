"""
Loyalty points earned on a purchase.
"""

from __future__ import annotations

import math
from decimal import Decimal

from shopsaga.pricing._money import to_decimal

TIER_MULTIPLIERS: dict[str, int] = {
    "basic": 1,
    "silver": 2,
    "gold": 3,
    "platinum": 5,
}

# (min amount, bonus points), highest first
SPEND_BONUSES: tuple[tuple[Decimal, int], ...] = (
    (Decimal("200"), 100),
    (Decimal("100"), 50),
    (Decimal("50"), 25),
)


def loyalty_points(amount: object, tier: str = "basic", birthday: bool = False) -> int:
    """
    One point per currency unit times the tier multiplier (doubled in the
    customer's birthday month), plus a flat bonus for larger purchases.
    """
    spent = to_decimal(amount)
    if spent is None or spent <= 0:
        return 0

    multiplier = TIER_MULTIPLIERS.get(tier, 1)
    if birthday:
        multiplier *= 2

    points = math.floor(spent * multiplier)
    bonus = next((pts for floor_amount, pts in SPEND_BONUSES if spent >= floor_amount), 0)
    return points + bonus


__all__ = ("TIER_MULTIPLIERS", "SPEND_BONUSES", "loyalty_points")
