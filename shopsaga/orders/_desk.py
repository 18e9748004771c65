"""
Order desk — post-checkout order operations over an order store.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from shopsaga._types import Result, Ok, Error
from shopsaga.errors import (
    CheckoutError,
    InvalidTransition,
    NotOrderOwner,
    OrderNotFound,
    PersistenceFailed,
)
from shopsaga.inventory import InventoryManager
from shopsaga.orders._lifecycle import can_cancel, transition
from shopsaga.orders._types import Order, OrderStatus
from shopsaga.policy import OrderPolicy
from shopsaga.pricing import ZERO, round_money

if TYPE_CHECKING:
    from shopsaga.storage import OrderStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class OrderStatistics:
    total_orders: int
    total_revenue: Decimal
    total_units: int
    average_order_value: Decimal
    status_counts: dict[OrderStatus, int] = field(default_factory=dict)


def _matches(
    order: Order,
    user_id: str | None,
    status: OrderStatus | None,
    since: datetime | None,
    until: datetime | None,
) -> bool:
    if user_id is not None and order.user_id != user_id:
        return False
    if status is not None and order.status != status:
        return False
    if since is not None and order.created_at < since:
        return False
    if until is not None and order.created_at > until:
        return False
    return True


class OrderDesk:
    """
    Lookup, cancellation and status updates for stored orders.

    Every mutation reads the order, changes it, and writes back only that
    order through the store's update(), so checkouts appending new orders
    are never overwritten. An asyncio.Lock serializes the desk's own
    read-change-write so two updates to one order cannot interleave.
    """

    def __init__(
        self,
        orders: OrderStore,
        inventory: InventoryManager,
        policy: OrderPolicy | None = None,
    ) -> None:
        self.orders = orders
        self.inventory = inventory
        self.policy = policy or OrderPolicy()
        self._lock = asyncio.Lock()

    async def _load(self) -> Result[list[Order], PersistenceFailed]:
        match await self.orders.load_all():
            case Ok(orders):
                return Ok(orders)
            case Error(e):
                return Error(PersistenceFailed(message=e.message))

    # ═══════════════════════════════════════════════════════════════════════════
    # Queries
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_order(self, order_id: str) -> Result[Order, CheckoutError]:
        match await self._load():
            case Error(e):
                return Error(e)
            case Ok(orders):
                pass
        found = next((o for o in orders if o.order_id == order_id), None)
        if found is None:
            return Error(OrderNotFound(message="Order not found", order_id=order_id))
        return Ok(found)

    async def user_orders(
        self,
        user_id: str,
        *,
        status: OrderStatus | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
    ) -> Result[list[Order], PersistenceFailed]:
        """A user's orders, newest first."""
        match await self._load():
            case Error(e):
                return Error(e)
            case Ok(orders):
                pass
        selected = [o for o in orders if _matches(o, user_id, status, since, until)]
        selected.sort(key=lambda o: o.created_at, reverse=True)
        if limit is not None and limit > 0:
            selected = selected[:limit]
        return Ok(selected)

    async def statistics(
        self,
        *,
        user_id: str | None = None,
        status: OrderStatus | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> Result[OrderStatistics, PersistenceFailed]:
        match await self._load():
            case Error(e):
                return Error(e)
            case Ok(orders):
                pass
        selected = [o for o in orders if _matches(o, user_id, status, since, until)]

        revenue = sum((o.total for o in selected), ZERO)
        counts = {s: 0 for s in OrderStatus}
        for order in selected:
            counts[order.status] += 1

        return Ok(OrderStatistics(
            total_orders=len(selected),
            total_revenue=round_money(revenue),
            total_units=sum(o.unit_count for o in selected),
            average_order_value=round_money(revenue / len(selected)) if selected else ZERO,
            status_counts=counts,
        ))

    # ═══════════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════════

    async def _replace(self, updated: Order) -> Result[Order, PersistenceFailed]:
        match await self.orders.update(updated):
            case Ok(_):
                return Ok(updated)
            case Error(e):
                logger.error("Order save failed", order_id=updated.order_id, error=e.message)
                return Error(PersistenceFailed(message=e.message))

    async def cancel_order(
        self,
        order_id: str,
        user_id: str,
        *,
        now: datetime | None = None,
    ) -> Result[Order, CheckoutError]:
        """
        Cancel a user's own order and return its stock.

        The cancellation is saved before stock is released, so a failed save
        leaves both order and stock as they were.
        """
        async with self._lock:
            match await self._load():
                case Error(e):
                    return Error(e)
                case Ok(orders):
                    pass

            order = next((o for o in orders if o.order_id == order_id), None)
            if order is None:
                return Error(OrderNotFound(message="Order not found", order_id=order_id))
            if order.user_id != user_id:
                logger.warning("Cancel refused: not owner", order_id=order_id, user_id=user_id)
                return Error(NotOrderOwner(order_id=order_id))
            if not can_cancel(order, now, window=self.policy.cancellation_window):
                return Error(InvalidTransition(
                    message="Order cannot be cancelled",
                    current=order.status.value,
                    attempted=OrderStatus.CANCELLED.value,
                ))

            match transition(order, OrderStatus.CANCELLED, now=now):
                case Error(e):
                    return Error(e)
                case Ok(cancelled):
                    pass

            match await self._replace(cancelled):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass

        for line in cancelled.items:
            if isinstance(self.inventory.release(line.product_id, line.quantity), Error):
                logger.error(
                    "Stock not returned for cancelled order",
                    order_id=order_id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                )

        logger.info("Order cancelled", order_id=order_id, user_id=user_id)
        return Ok(cancelled)

    async def update_status(
        self,
        order_id: str,
        new_status: OrderStatus | str,
    ) -> Result[Order, CheckoutError]:
        async with self._lock:
            match await self._load():
                case Error(e):
                    return Error(e)
                case Ok(orders):
                    pass

            order = next((o for o in orders if o.order_id == order_id), None)
            if order is None:
                return Error(OrderNotFound(message="Order not found", order_id=order_id))

            match transition(order, new_status):
                case Error(e):
                    return Error(e)
                case Ok(updated):
                    pass

            result = await self._replace(updated)

        if isinstance(result, Ok):
            logger.info("Order status updated", order_id=order_id, status=updated.status.value)
        return result


__all__ = ("OrderStatistics", "OrderDesk")
