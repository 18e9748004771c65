"""
Order lifecycle — the status state machine and its guards.

    pending ──> confirmed ──> shipped ──> delivered
       │            │            │
       └────────────┴────────────┴──> cancelled

delivered and cancelled are terminal.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from shopsaga._types import Result, Ok, Error
from shopsaga.errors import InvalidTransition, OrderNotReady
from shopsaga.orders._types import Order, OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

CANCELLATION_WINDOW = timedelta(hours=24)
EXPRESS_MIN_SUBTOTAL = Decimal("100")
EXPRESS_MIN_SUBTOTAL_DOMESTIC = Decimal("50")


def allowed_transitions(status: OrderStatus) -> frozenset[OrderStatus]:
    return TRANSITIONS[status]


def transition(
    order: Order,
    new_status: OrderStatus | str,
    *,
    now: datetime | None = None,
) -> Result[Order, InvalidTransition]:
    """New Order in new_status, or InvalidTransition with the original untouched."""
    try:
        target = OrderStatus(new_status)
    except ValueError:
        return Error(InvalidTransition(
            message=f"Unknown order status: {new_status!r}",
            current=order.status.value,
            attempted=str(new_status),
        ))

    if target not in TRANSITIONS[order.status]:
        return Error(InvalidTransition(
            message=f"Cannot transition from {order.status.value} to {target.value}",
            current=order.status.value,
            attempted=target.value,
        ))

    return Ok(replace(order, status=target, updated_at=now or datetime.now(UTC)))


def can_cancel(
    order: Order,
    now: datetime | None = None,
    *,
    window: timedelta = CANCELLATION_WINDOW,
) -> bool:
    """
    Cancelled and delivered orders cannot be cancelled; shipped ones only
    within `window` of creation.
    """
    if order.status in (OrderStatus.CANCELLED, OrderStatus.DELIVERED):
        return False
    if order.status is OrderStatus.SHIPPED:
        age = (now or datetime.now(UTC)) - order.created_at
        return age <= window
    return True


def ready_to_confirm(order: Order) -> Result[Order, OrderNotReady]:
    problems: list[str] = []
    if not order.items:
        problems.append("Order must have at least one item")
    if order.shipping_address is None:
        problems.append("Shipping address is required")
    if not order.payment_method:
        problems.append("Payment method is required")
    if order.items and order.total == 0:
        problems.append("Order totals not calculated")

    if problems:
        return Error(OrderNotReady(message="; ".join(problems), problems=tuple(problems)))
    return Ok(order)


def is_express_shipping_eligible(order: Order) -> bool:
    """Open orders over 100, or over 50 when shipping to the US."""
    if order.status not in (OrderStatus.PENDING, OrderStatus.CONFIRMED):
        return False
    if order.subtotal >= EXPRESS_MIN_SUBTOTAL:
        return True
    domestic = order.shipping_address is not None and order.shipping_address.country == "US"
    return domestic and order.subtotal >= EXPRESS_MIN_SUBTOTAL_DOMESTIC


__all__ = (
    "TRANSITIONS",
    "CANCELLATION_WINDOW",
    "allowed_transitions",
    "transition",
    "can_cancel",
    "ready_to_confirm",
    "is_express_shipping_eligible",
)
