"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum, auto


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLineItem:
    """One product in a cart. Price and title are snapshots taken on add."""

    product_id: str
    quantity: int
    unit_price: Decimal
    title: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(slots=True)
class Cart:
    """
    A user's cart. Line items are unique by product_id and keep insertion
    order; mutate it only through the functions in shopsaga.cart.
    """

    owner_id: str
    items: list[CartLineItem] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def find(self, product_id: str) -> CartLineItem | None:
        return next((i for i in self.items if i.product_id == product_id), None)

    def is_empty(self) -> bool:
        return not self.items

    def touch(self) -> None:
        self.updated_at = _utcnow()


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartTotals:
    subtotal: Decimal
    discount: Decimal
    discount_label: str  # "none", "tier-silver", "code-SAVE10", ...
    total: Decimal
    item_count: int


@dataclass(frozen=True, slots=True)
class StockIssue:
    product_id: str
    requested: int
    available: int


@dataclass(frozen=True, slots=True)
class MergeFailure:
    product_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class MergeReport:
    merged: int
    failed: tuple[MergeFailure, ...] = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    INVALID_PRODUCT = auto()
    INVALID_QUANTITY = auto()
    INVALID_PRICE = auto()
    NOT_IN_CART = auto()
    SAME_CART = auto()


@dataclass(frozen=True, slots=True)
class CartError:
    kind: CartErrorKind
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CartLineItem",
    "Cart",
    "CartTotals",
    "StockIssue",
    "MergeFailure",
    "MergeReport",
    "CartErrorKind",
    "CartError",
)
