"""
Checkout types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from shopsaga.errors import CheckoutError
from shopsaga.orders import Address, Order


@dataclass(frozen=True, slots=True)
class OrderDetails:
    """
    What the customer submits with a checkout.

    Shipping parameters left as None fall back to the CheckoutPolicy.
    """

    shipping_address: Mapping[str, Any] | Address | None
    payment_method: str
    discount_code: str | None = None
    shipping_zone: str | None = None
    weight: int | float | Decimal | None = None
    shipping_speed: str | None = None


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    success: bool
    message: str
    order: Order | None = None
    error: CheckoutError | None = None

    @classmethod
    def completed(cls, order: Order) -> CheckoutResult:
        return cls(success=True, message="Order created successfully", order=order)

    @classmethod
    def failed(cls, error: CheckoutError) -> CheckoutResult:
        return cls(success=False, message=error.message, error=error)


__all__ = ("OrderDetails", "CheckoutResult")
