"""
Checkout and inventory policies — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta
from decimal import Decimal

from shopsaga.pricing import FREE_SHIPPING_THRESHOLD, to_decimal


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutPolicy:
    """
    How the orchestrator prices, ships and pays for an order.

    Fluent builder — chain methods to configure.

    Example:
        policy = (
            CheckoutPolicy()
            .with_free_shipping(threshold=100, min_items=12)
            .with_default_region("NY")
            .with_payment_timeout(seconds=2)
        )

    Note: Immutable — each method returns a new CheckoutPolicy.
    """

    free_shipping_threshold: Decimal = FREE_SHIPPING_THRESHOLD
    free_shipping_min_items: int = 10
    default_region: str = "CA"
    default_zone: str = "local"
    default_weight: Decimal = Decimal("1")
    shipping_speed: str = "standard"
    payment_timeout: timedelta = timedelta(seconds=5)

    def with_free_shipping(
        self,
        *,
        threshold: int | float | Decimal | None = None,
        min_items: int | None = None,
    ) -> CheckoutPolicy:
        """
        Free shipping once subtotal reaches threshold or the cart holds
        min_items units.

        Example:
            .with_free_shipping(threshold=50)
            .with_free_shipping(min_items=5)
        """
        amount = to_decimal(threshold) if threshold is not None else None
        return replace(
            self,
            free_shipping_threshold=amount if amount is not None else self.free_shipping_threshold,
            free_shipping_min_items=min_items if min_items is not None else self.free_shipping_min_items,
        )

    def with_default_region(self, region: str) -> CheckoutPolicy:
        """Tax region used when the shipping address has no state."""
        return replace(self, default_region=region.upper())

    def with_shipping(
        self,
        *,
        zone: str | None = None,
        weight: int | float | Decimal | None = None,
        speed: str | None = None,
    ) -> CheckoutPolicy:
        """
        Parcel parameters for orders that do not qualify for free shipping.

        Example:
            .with_shipping(zone="national", speed="expedited")
        """
        kg = to_decimal(weight) if weight is not None else None
        return replace(
            self,
            default_zone=zone or self.default_zone,
            default_weight=kg if kg is not None else self.default_weight,
            shipping_speed=speed or self.shipping_speed,
        )

    def with_payment_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutPolicy:
        """
        Upper bound on a payment decision; exceeding it declines the payment.

        Example:
            .with_payment_timeout(seconds=2)
        """
        timeout = delta if delta else timedelta(seconds=seconds or 5)
        return replace(self, payment_timeout=timeout)


# ═══════════════════════════════════════════════════════════════════════════════
# Inventory Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class InventoryPolicy:
    """
    Inventory manager limits.

    Example:
        policy = InventoryPolicy().with_log_capacity(200).with_max_stock(500)
    """

    log_capacity: int = 1000
    max_stock: int = 1000

    def with_log_capacity(self, capacity: int) -> InventoryPolicy:
        """Oldest log entries are evicted once capacity is reached."""
        return replace(self, log_capacity=capacity)

    def with_max_stock(self, max_stock: int) -> InventoryPolicy:
        """Default ceiling for restock()."""
        return replace(self, max_stock=max_stock)


# ═══════════════════════════════════════════════════════════════════════════════
# Order Policy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderPolicy:
    # Shipped orders can still be cancelled inside this window.
    cancellation_window: timedelta = timedelta(hours=24)

    def with_cancellation_window(
        self,
        *,
        hours: float | None = None,
        delta: timedelta | None = None,
    ) -> OrderPolicy:
        window = delta if delta else timedelta(hours=hours or 24)
        return replace(self, cancellation_window=window)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CheckoutPolicy",
    "InventoryPolicy",
    "OrderPolicy",
)
