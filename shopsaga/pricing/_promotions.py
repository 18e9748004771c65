"""
Product-level promotion codes.

Unlike cart discount codes these apply to a single price and depend on the
product being promoted (its category, whether it is new or on clearance).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from shopsaga.pricing._money import ZERO, round_money, to_decimal


@dataclass(frozen=True, slots=True)
class PromoContext:
    category: str = ""
    is_new: bool = False
    is_clearance: bool = False


@dataclass(frozen=True, slots=True)
class Promotion:
    original_price: Decimal
    final_price: Decimal
    discount: Decimal
    applied: bool


@dataclass(frozen=True, slots=True)
class _PromoRule:
    percent: int
    eligible: Callable[[Decimal, PromoContext], bool]


PROMOTIONS: dict[str, _PromoRule] = {
    "WELCOME10": _PromoRule(10, lambda price, ctx: True),
    "SAVE20": _PromoRule(20, lambda price, ctx: price >= 50),
    "CLEARANCE30": _PromoRule(30, lambda price, ctx: ctx.is_clearance),
    "NEWRELEASE15": _PromoRule(15, lambda price, ctx: ctx.is_new),
    "FICTION25": _PromoRule(25, lambda price, ctx: ctx.category.lower() == "fiction"),
}


def apply_promotion(
    price: object,
    code: str | None,
    product: PromoContext | None = None,
) -> Promotion:
    amount = to_decimal(price)
    if amount is None or amount <= 0:
        return Promotion(ZERO, ZERO, ZERO, applied=False)

    ctx = product or PromoContext()
    rule = PROMOTIONS.get(code.strip().upper()) if isinstance(code, str) else None

    if rule is None or not rule.eligible(amount, ctx):
        original = round_money(amount)
        return Promotion(original, original, ZERO, applied=False)

    discount = amount * rule.percent / 100
    return Promotion(
        original_price=round_money(amount),
        final_price=round_money(amount - discount),
        discount=round_money(discount),
        applied=True,
    )


__all__ = ("PromoContext", "Promotion", "PROMOTIONS", "apply_promotion")
