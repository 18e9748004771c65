"""
Sales tax — fixed per-region rate table with category exemptions.
"""

from __future__ import annotations

from decimal import Decimal

from shopsaga.pricing._money import ZERO, round_money, to_decimal

TAX_RATES: dict[str, Decimal] = {
    "CA": Decimal("0.0725"),
    "NY": Decimal("0.08"),
    "TX": Decimal("0.0625"),
    "FL": Decimal("0.06"),
    "IL": Decimal("0.0625"),
    "PA": Decimal("0.06"),
    "OH": Decimal("0.0575"),
}
DEFAULT_TAX_RATE = Decimal("0.07")

EXEMPT_CATEGORIES = frozenset({"education", "children"})


def tax_rate(region: object) -> Decimal:
    if isinstance(region, str):
        return TAX_RATES.get(region.strip().upper(), DEFAULT_TAX_RATE)
    return DEFAULT_TAX_RATE


def is_exempt(category: object) -> bool:
    return isinstance(category, str) and category.strip().lower() in EXEMPT_CATEGORIES


def tax(amount: object, region: object, category: object = "") -> Decimal:
    """Tax owed on amount; 0 for exempt categories or non-positive amounts."""
    taxable = to_decimal(amount)
    if taxable is None or taxable <= 0 or is_exempt(category):
        return ZERO
    return round_money(taxable * tax_rate(region))


__all__ = (
    "TAX_RATES",
    "DEFAULT_TAX_RATE",
    "EXEMPT_CATEGORIES",
    "tax_rate",
    "is_exempt",
    "tax",
)
