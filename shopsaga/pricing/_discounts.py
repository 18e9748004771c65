"""
Discounts — subtotal tiers, bulk quantity breaks, discount codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from shopsaga.pricing._money import ZERO, as_whole, round_money, to_decimal

# ═══════════════════════════════════════════════════════════════════════════════
# Discount Tiers — Automatic, Subtotal-Indexed
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DiscountTier:
    name: str
    rate: Decimal
    min_purchase: Decimal


NO_TIER = DiscountTier("none", Decimal("0"), Decimal("0"))

# Highest first; lower edge of each bracket is inclusive.
DISCOUNT_TIERS: tuple[DiscountTier, ...] = (
    DiscountTier("diamond", Decimal("0.25"), Decimal("1000")),
    DiscountTier("platinum", Decimal("0.20"), Decimal("500")),
    DiscountTier("gold", Decimal("0.15"), Decimal("200")),
    DiscountTier("silver", Decimal("0.10"), Decimal("100")),
    DiscountTier("bronze", Decimal("0.05"), Decimal("50")),
)


def tier_for(subtotal: object) -> DiscountTier:
    """Bracket the subtotal falls into; NO_TIER for invalid or small amounts."""
    amount = to_decimal(subtotal)
    if amount is None or amount < 0:
        return NO_TIER
    for tier in DISCOUNT_TIERS:
        if amount >= tier.min_purchase:
            return tier
    return NO_TIER


def discount_tier(subtotal: object) -> Decimal:
    """
    Discount fraction for a subtotal.

        discount_tier(49.99)  -> Decimal("0")
        discount_tier(50)     -> Decimal("0.05")
        discount_tier(1000)   -> Decimal("0.25")
    """
    return tier_for(subtotal).rate


# ═══════════════════════════════════════════════════════════════════════════════
# Generic Discount Arithmetic
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountKind(StrEnum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def calculate_discount(subtotal: object, kind: str, value: object) -> Decimal:
    """
    Discount amount for a percentage or fixed-value rule.

    Percentages are capped at 100, fixed amounts at the subtotal.
    Invalid inputs yield 0.
    """
    amount = to_decimal(subtotal)
    raw = to_decimal(value)
    if amount is None or amount < 0 or raw is None or raw < 0:
        return ZERO

    match kind:
        case DiscountKind.PERCENTAGE:
            discount = amount * min(raw, Decimal(100)) / 100
        case DiscountKind.FIXED:
            discount = min(raw, amount)
        case _:
            return ZERO

    return round_money(discount)


# ═══════════════════════════════════════════════════════════════════════════════
# Discount Codes — Cart-Level, Mutually Exclusive with Tiers
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DiscountCode:
    code: str
    kind: DiscountKind
    value: Decimal
    min_purchase: Decimal = Decimal("0")

    def applies_to(self, subtotal: Decimal) -> bool:
        return subtotal >= self.min_purchase

    def discount_for(self, subtotal: Decimal) -> Decimal:
        if not self.applies_to(subtotal):
            return ZERO
        return calculate_discount(subtotal, self.kind, self.value)


DISCOUNT_CODES: dict[str, DiscountCode] = {
    "SAVE10": DiscountCode("SAVE10", DiscountKind.PERCENTAGE, Decimal("10"), Decimal("30")),
    "SAVE20": DiscountCode("SAVE20", DiscountKind.PERCENTAGE, Decimal("20"), Decimal("50")),
    "FLAT15": DiscountCode("FLAT15", DiscountKind.FIXED, Decimal("15")),
}


def lookup_code(code: str | None) -> DiscountCode | None:
    if not code:
        return None
    return DISCOUNT_CODES.get(code.strip().upper())


# ═══════════════════════════════════════════════════════════════════════════════
# Bulk Discounts — Per Line, Quantity Breakpoints
# ═══════════════════════════════════════════════════════════════════════════════

# (min quantity, percent off), highest first
BULK_BREAKPOINTS: tuple[tuple[int, int], ...] = (
    (200, 30),
    (100, 25),
    (50, 20),
    (20, 15),
    (10, 10),
    (5, 5),
)


@dataclass(frozen=True, slots=True)
class BulkPrice:
    line_total: Decimal
    percent: int
    discount: Decimal
    final_price: Decimal


NO_BULK_PRICE = BulkPrice(ZERO, 0, ZERO, ZERO)


def bulk_pricing(quantity: object, unit_price: object) -> BulkPrice:
    """Line total, applicable bulk rate, discount and final price for one line."""
    units = as_whole(quantity)
    price = to_decimal(unit_price)
    if units is None or units <= 0 or price is None or price <= 0:
        return NO_BULK_PRICE

    line_total = units * price
    percent = next((pct for min_qty, pct in BULK_BREAKPOINTS if units >= min_qty), 0)
    discount = line_total * percent / 100

    return BulkPrice(
        line_total=round_money(line_total),
        percent=percent,
        discount=round_money(discount),
        final_price=round_money(line_total - discount),
    )


def bulk_discount(quantity: object, unit_price: object) -> Decimal:
    """Bulk discount amount for a line; 0 for invalid quantity or price."""
    return bulk_pricing(quantity, unit_price).discount


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "DiscountTier",
    "NO_TIER",
    "DISCOUNT_TIERS",
    "tier_for",
    "discount_tier",
    "DiscountKind",
    "calculate_discount",
    "DiscountCode",
    "DISCOUNT_CODES",
    "lookup_code",
    "BULK_BREAKPOINTS",
    "BulkPrice",
    "bulk_pricing",
    "bulk_discount",
)
