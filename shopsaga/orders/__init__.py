"""
Orders — order records, the status state machine, and the order desk.

    from shopsaga import orders as O

    match O.transition(order, O.OrderStatus.SHIPPED):
        case Ok(shipped): ...
        case Error(InvalidTransition(current=c, attempted=a)): ...
"""

from shopsaga.orders._types import (
    new_order_id,
    OrderStatus,
    Address,
    OrderLine,
    Order,
)
from shopsaga.orders._lifecycle import (
    TRANSITIONS,
    CANCELLATION_WINDOW,
    allowed_transitions,
    transition,
    can_cancel,
    ready_to_confirm,
    is_express_shipping_eligible,
)
from shopsaga.orders._desk import OrderStatistics, OrderDesk

__all__ = (
    "new_order_id",
    "OrderStatus",
    "Address",
    "OrderLine",
    "Order",
    "TRANSITIONS",
    "CANCELLATION_WINDOW",
    "allowed_transitions",
    "transition",
    "can_cancel",
    "ready_to_confirm",
    "is_express_shipping_eligible",
    "OrderStatistics",
    "OrderDesk",
)
