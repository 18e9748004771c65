"""
Order types.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

from shopsaga.pricing import ZERO, final_total, round_money


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_order_id() -> str:
    """ORD-<epoch millis>-<random hex>."""
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


class OrderStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# ═══════════════════════════════════════════════════════════════════════════════
# Value Objects
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Address:
    street: str
    city: str
    zip: str
    country: str
    state: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Address:
        return cls(
            street=str(data["street"]),
            city=str(data["city"]),
            zip=str(data["zip"]),
            country=str(data["country"]),
            state=str(data.get("state") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "street": self.street,
            "city": self.city,
            "zip": self.zip,
            "country": self.country,
            "state": self.state,
        }


@dataclass(frozen=True, slots=True)
class OrderLine:
    product_id: str
    quantity: int
    unit_price: Decimal
    title: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    """
    A placed order. Immutable: status changes go through
    shopsaga.orders.transition(), which returns a new Order.
    """

    order_id: str
    user_id: str
    items: tuple[OrderLine, ...]
    status: OrderStatus = OrderStatus.PENDING
    subtotal: Decimal = ZERO
    discount: Decimal = ZERO
    tax: Decimal = ZERO
    shipping: Decimal = ZERO
    total: Decimal = ZERO
    shipping_address: Address | None = None
    payment_method: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def unit_count(self) -> int:
        return sum(line.quantity for line in self.items)

    def with_totals(
        self,
        *,
        discount: Decimal = ZERO,
        tax: Decimal = ZERO,
        shipping: Decimal = ZERO,
    ) -> Order:
        """Price the order from its lines. Discount is clamped to [0, subtotal]."""
        subtotal = round_money(sum((line.line_total for line in self.items), Decimal(0)))
        off = min(max(discount, ZERO), subtotal)
        return replace(
            self,
            subtotal=subtotal,
            discount=round_money(off),
            tax=round_money(tax),
            shipping=round_money(shipping),
            total=final_total(subtotal, off, shipping, tax),
            updated_at=_utcnow(),
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Serialization
    # ───────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "user_id": self.user_id,
            "items": [
                {
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "unit_price": str(line.unit_price),
                    "title": line.title,
                }
                for line in self.items
            ],
            "status": self.status.value,
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "tax": str(self.tax),
            "shipping": str(self.shipping),
            "total": str(self.total),
            "shipping_address": self.shipping_address.to_dict() if self.shipping_address else None,
            "payment_method": self.payment_method,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Order:
        address = data.get("shipping_address")
        return cls(
            order_id=data["order_id"],
            user_id=data["user_id"],
            items=tuple(
                OrderLine(
                    product_id=item["product_id"],
                    quantity=int(item["quantity"]),
                    unit_price=Decimal(item["unit_price"]),
                    title=item.get("title", ""),
                )
                for item in data.get("items", ())
            ),
            status=OrderStatus(data.get("status", OrderStatus.PENDING)),
            subtotal=Decimal(data.get("subtotal", "0.00")),
            discount=Decimal(data.get("discount", "0.00")),
            tax=Decimal(data.get("tax", "0.00")),
            shipping=Decimal(data.get("shipping", "0.00")),
            total=Decimal(data.get("total", "0.00")),
            shipping_address=Address.from_mapping(address) if address else None,
            payment_method=data.get("payment_method"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


__all__ = (
    "new_order_id",
    "OrderStatus",
    "Address",
    "OrderLine",
    "Order",
)
