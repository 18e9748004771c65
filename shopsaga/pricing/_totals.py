"""
Final order total from its priced components.
"""

from __future__ import annotations

from decimal import Decimal

from shopsaga.pricing._money import ZERO, round_money, to_decimal


def final_total(
    subtotal: object,
    discount: object = 0,
    shipping: object = 0,
    tax: object = 0,
    gift_wrap: object = 0,
) -> Decimal:
    """
    max(subtotal - discount, 0) + shipping + tax + gift_wrap.

    Any invalid or negative component other than gift_wrap makes the whole
    total 0; an invalid gift_wrap is ignored.
    """
    parts = [to_decimal(v) for v in (subtotal, discount, shipping, tax)]
    if any(p is None or p < 0 for p in parts):
        return ZERO
    amount, off, ship, owed = parts

    wrap = to_decimal(gift_wrap)
    if wrap is None or wrap < 0:
        wrap = ZERO

    return round_money(max(amount - off, ZERO) + ship + owed + wrap)


__all__ = ("final_total",)
