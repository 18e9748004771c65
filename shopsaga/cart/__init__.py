"""
Cart — line items, totals and the per-owner cart ledger.

    from shopsaga import cart as C

    ledger = C.CartLedger()
    cart = ledger.get_or_create_cart("alice")
    C.add_item(cart, "p1", 3, Decimal("10.00"), "Dune")
    C.compute_totals(cart, "SAVE10")    # code overrides tier, never stacked
"""

from shopsaga.cart._types import (
    CartLineItem,
    Cart,
    CartTotals,
    StockIssue,
    MergeFailure,
    MergeReport,
    CartErrorKind,
    CartError,
)
from shopsaga.cart._ops import (
    StockChecker,
    FREE_SHIPPING_MIN_ITEMS,
    add_item,
    remove_item,
    update_quantity,
    clear,
    deduct,
    subtotal,
    item_count,
    qualifies_for_free_shipping,
    compute_totals,
    validate_stock,
)
from shopsaga.cart._ledger import CartLedger

__all__ = (
    "CartLineItem",
    "Cart",
    "CartTotals",
    "StockIssue",
    "MergeFailure",
    "MergeReport",
    "CartErrorKind",
    "CartError",
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
    "CartLedger",
)
