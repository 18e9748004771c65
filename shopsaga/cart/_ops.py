"""
Cart operations — mutation, totals, stock pre-check.

Mutating functions validate first and touch the cart only on success, so an
Error result always means the cart is unchanged.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from decimal import Decimal

from shopsaga._types import Result, Ok, Error
from shopsaga.cart._types import (
    Cart,
    CartError,
    CartErrorKind,
    CartLineItem,
    CartTotals,
    StockIssue,
)
from shopsaga.inventory import StockCheck
from shopsaga.pricing import (
    FREE_SHIPPING_THRESHOLD,
    ZERO,
    DiscountKind,
    as_whole,
    calculate_discount,
    lookup_code,
    round_money,
    tier_for,
    to_decimal,
)

type StockChecker = Callable[[str, int], StockCheck]

FREE_SHIPPING_MIN_ITEMS = 10


def _invalid_quantity() -> Error[CartError]:
    return Error(CartError(CartErrorKind.INVALID_QUANTITY, "Quantity must be a positive whole number"))


# ═══════════════════════════════════════════════════════════════════════════════
# Mutation
# ═══════════════════════════════════════════════════════════════════════════════


def add_item(
    cart: Cart,
    product_id: str,
    quantity: object,
    unit_price: object,
    title: str = "",
) -> Result[CartLineItem, CartError]:
    """Add a product, merging quantity into an existing line for it."""
    if not product_id:
        return Error(CartError(CartErrorKind.INVALID_PRODUCT, "Product ID is required"))
    units = as_whole(quantity)
    if units is None or units <= 0:
        return _invalid_quantity()
    price = to_decimal(unit_price)
    if price is None or price < 0:
        return Error(CartError(CartErrorKind.INVALID_PRICE, "Price must be a non-negative number"))

    for index, line in enumerate(cart.items):
        if line.product_id == product_id:
            merged = replace(line, quantity=line.quantity + units)
            cart.items[index] = merged
            cart.touch()
            return Ok(merged)

    line = CartLineItem(product_id, units, price, title)
    cart.items.append(line)
    cart.touch()
    return Ok(line)


def remove_item(cart: Cart, product_id: str) -> bool:
    before = len(cart.items)
    cart.items[:] = [i for i in cart.items if i.product_id != product_id]
    if len(cart.items) == before:
        return False
    cart.touch()
    return True


def update_quantity(
    cart: Cart,
    product_id: str,
    new_quantity: object,
) -> Result[CartLineItem | None, CartError]:
    """
    Replace a line's quantity. 0 removes the line (Ok(None)); negative or
    fractional quantities are rejected.
    """
    units = as_whole(new_quantity)
    if units is None or units < 0:
        return _invalid_quantity()

    line = cart.find(product_id)
    if line is None:
        return Error(CartError(CartErrorKind.NOT_IN_CART, "Item not found in cart"))

    if units == 0:
        remove_item(cart, product_id)
        return Ok(None)

    updated = replace(line, quantity=units)
    cart.items[cart.items.index(line)] = updated
    cart.touch()
    return Ok(updated)


def clear(cart: Cart) -> None:
    cart.items.clear()
    cart.touch()


def deduct(cart: Cart, lines: Iterable[tuple[str, int]]) -> int:
    """
    Take ordered quantities out of the cart. A line that reaches zero is
    dropped; lines not mentioned, or added since the order was priced, stay.
    Returns the number of units removed.
    """
    removed = 0
    for product_id, quantity in lines:
        line = cart.find(product_id)
        if line is None:
            continue
        taken = min(line.quantity, quantity)
        removed += taken
        if taken == line.quantity:
            cart.items.remove(line)
        else:
            cart.items[cart.items.index(line)] = replace(line, quantity=line.quantity - taken)
    if removed:
        cart.touch()
    return removed


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


def subtotal(cart: Cart) -> Decimal:
    return round_money(sum((i.line_total for i in cart.items), Decimal(0)))


def item_count(cart: Cart) -> int:
    return sum(i.quantity for i in cart.items)


def qualifies_for_free_shipping(
    cart: Cart,
    threshold: Decimal | int | float = FREE_SHIPPING_THRESHOLD,
    *,
    min_items: int = FREE_SHIPPING_MIN_ITEMS,
) -> bool:
    """Subtotal at or over threshold, or at least min_items units."""
    limit = to_decimal(threshold)
    if limit is None or limit <= 0:
        return True
    return subtotal(cart) >= limit or item_count(cart) >= min_items


def compute_totals(cart: Cart, discount_code: str | None = None) -> CartTotals:
    """
    Subtotal, discount and total for the cart.

    Without a code the subtotal tier applies. With one, only the code's own
    rule applies: an unknown code, or one below its minimum purchase, gives
    no discount rather than falling back to the tier.
    """
    if cart.is_empty():
        return CartTotals(ZERO, ZERO, "none", ZERO, 0)

    amount = subtotal(cart)
    discount = ZERO
    label = "none"

    if discount_code and discount_code.strip():
        code = lookup_code(discount_code)
        if code is not None and code.applies_to(amount):
            discount = code.discount_for(amount)
            label = f"code-{code.code}"
    else:
        tier = tier_for(amount)
        if tier.rate > 0:
            discount = calculate_discount(amount, DiscountKind.PERCENTAGE, tier.rate * 100)
            label = f"tier-{tier.name}"

    return CartTotals(
        subtotal=amount,
        discount=discount,
        discount_label=label,
        total=round_money(amount - discount),
        item_count=item_count(cart),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Stock Pre-Check
# ═══════════════════════════════════════════════════════════════════════════════


def validate_stock(cart: Cart, checker: StockChecker) -> Result[None, tuple[StockIssue, ...]]:
    """Check every line against current stock; Error lists every short line."""
    issues: list[StockIssue] = []
    for line in cart.items:
        check = checker(line.product_id, line.quantity)
        if not check.available:
            issues.append(StockIssue(line.product_id, line.quantity, check.current_stock))
    if issues:
        return Error(tuple(issues))
    return Ok(None)


__all__ = (
    "StockChecker",
    "FREE_SHIPPING_MIN_ITEMS",
    "add_item",
    "remove_item",
    "update_quantity",
    "clear",
    "deduct",
    "subtotal",
    "item_count",
    "qualifies_for_free_shipping",
    "compute_totals",
    "validate_stock",
)
