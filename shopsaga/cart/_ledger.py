"""
Cart ledger — per-owner cart store.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

import structlog

from shopsaga._types import Result, Ok, Error
from shopsaga.cart._ops import StockChecker, add_item, clear, deduct
from shopsaga.cart._types import (
    Cart,
    CartError,
    CartErrorKind,
    MergeFailure,
    MergeReport,
)

logger = structlog.get_logger(__name__)


class CartLedger:
    """
    Owns every cart, keyed by owner id.

    Carts are created lazily on first access. Checkout removes the ordered
    lines and leaves the cart itself in place. The only deletion is a guest
    cart after it has been merged.
    """

    def __init__(self) -> None:
        self._carts: dict[str, Cart] = {}
        self._lock = threading.Lock()

    def get_or_create_cart(self, owner_id: str) -> Cart:
        if not owner_id:
            raise ValueError("owner_id is required")
        with self._lock:
            cart = self._carts.get(owner_id)
            if cart is None:
                cart = self._carts[owner_id] = Cart(owner_id)
            return cart

    def get_cart(self, owner_id: str) -> Cart | None:
        return self._carts.get(owner_id)

    def clear_cart(self, owner_id: str) -> bool:
        cart = self._carts.get(owner_id)
        if cart is None:
            return False
        clear(cart)
        logger.debug("Cart cleared", owner_id=owner_id)
        return True

    def remove_ordered(self, owner_id: str, lines: Iterable[tuple[str, int]]) -> int:
        """Deduct an order's lines from the owner's cart, leaving anything else."""
        cart = self._carts.get(owner_id)
        if cart is None:
            return 0
        with self._lock:
            removed = deduct(cart, lines)
        logger.debug("Ordered lines removed from cart", owner_id=owner_id, units=removed)
        return removed

    def merge_guest_cart(
        self,
        guest_id: str,
        user_id: str,
        checker: StockChecker | None = None,
    ) -> Result[MergeReport, CartError]:
        """
        Move a guest's lines into the user's cart after login.

        With a checker, a line whose merged quantity would exceed current
        stock is skipped and reported. The guest cart is dropped either way.
        """
        if guest_id == user_id:
            return Error(CartError(CartErrorKind.SAME_CART, "Cannot merge same cart"))

        with self._lock:
            guest = self._carts.pop(guest_id, None)
        if guest is None or guest.is_empty():
            return Ok(MergeReport(merged=0))

        target = self.get_or_create_cart(user_id)
        merged = 0
        failed: list[MergeFailure] = []

        for line in guest.items:
            if checker is not None:
                existing = target.find(line.product_id)
                wanted = line.quantity + (existing.quantity if existing else 0)
                check = checker(line.product_id, wanted)
                if not check.available:
                    failed.append(MergeFailure(
                        line.product_id,
                        f"Only {check.current_stock} items available in stock",
                    ))
                    continue

            match add_item(target, line.product_id, line.quantity, line.unit_price, line.title):
                case Ok(_):
                    merged += 1
                case Error(e):
                    failed.append(MergeFailure(line.product_id, e.message))

        logger.info(
            "Guest cart merged",
            guest_id=guest_id,
            user_id=user_id,
            merged=merged,
            failed=len(failed),
        )
        return Ok(MergeReport(merged=merged, failed=tuple(failed)))


__all__ = ("CartLedger",)
