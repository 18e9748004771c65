"""Tests for the order status state machine and its guards."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from helpers import unwrap, unwrap_err

from shopsaga.errors import ErrorKind
from shopsaga.orders import (
    Address,
    Order,
    OrderLine,
    OrderStatus,
    allowed_transitions,
    can_cancel,
    is_express_shipping_eligible,
    ready_to_confirm,
    transition,
)

CREATED = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def make_order(status=OrderStatus.PENDING, *, country="US", **overrides):
    order = Order(
        order_id="ORD-1",
        user_id="alice",
        items=(OrderLine("p1", 2, Decimal("30.00"), "Dune"),),
        status=status,
        shipping_address=Address("123 Main Street", "Springfield", "90210", country, "CA"),
        payment_method="credit_card",
        created_at=CREATED,
        updated_at=CREATED,
    ).with_totals(tax=Decimal("4.35"))
    return replace(order, **overrides)


class TestTransition:
    @pytest.mark.parametrize(
        "start, target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
        ],
    )
    def test_allowed(self, start, target):
        moved = unwrap(transition(make_order(start), target))
        assert moved.status is target

    @pytest.mark.parametrize(
        "start, target",
        [
            (OrderStatus.SHIPPED, OrderStatus.PENDING),
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        ],
    )
    def test_refused(self, start, target):
        order = make_order(start)
        error = unwrap_err(transition(order, target))
        assert error.kind is ErrorKind.INVALID_TRANSITION
        assert error.current == start.value
        assert error.attempted == target.value
        assert order.status is start

    def test_accepts_status_string(self):
        assert unwrap(transition(make_order(), "confirmed")).status is OrderStatus.CONFIRMED

    def test_unknown_status(self):
        error = unwrap_err(transition(make_order(), "teleported"))
        assert error.attempted == "teleported"

    def test_stamps_updated_at(self):
        now = CREATED + timedelta(hours=1)
        moved = unwrap(transition(make_order(), OrderStatus.CONFIRMED, now=now))
        assert moved.updated_at == now
        assert moved.created_at == CREATED

    def test_terminal_states(self):
        assert allowed_transitions(OrderStatus.DELIVERED) == frozenset()
        assert allowed_transitions(OrderStatus.CANCELLED) == frozenset()


class TestCanCancel:
    def test_open_orders(self):
        assert can_cancel(make_order(OrderStatus.PENDING))
        assert can_cancel(make_order(OrderStatus.CONFIRMED))

    def test_closed_orders(self):
        assert not can_cancel(make_order(OrderStatus.CANCELLED))
        assert not can_cancel(make_order(OrderStatus.DELIVERED))

    def test_shipped_inside_window(self):
        order = make_order(OrderStatus.SHIPPED)
        assert can_cancel(order, CREATED + timedelta(hours=23))

    def test_shipped_outside_window(self):
        order = make_order(OrderStatus.SHIPPED)
        assert not can_cancel(order, CREATED + timedelta(hours=25))

    def test_custom_window(self):
        order = make_order(OrderStatus.SHIPPED)
        assert can_cancel(order, CREATED + timedelta(hours=30), window=timedelta(hours=48))


class TestReadyToConfirm:
    def test_ready(self):
        order = make_order()
        assert unwrap(ready_to_confirm(order)) is order

    def test_lists_every_problem(self):
        order = Order(order_id="ORD-2", user_id="alice", items=())
        error = unwrap_err(ready_to_confirm(order))
        assert error.problems == (
            "Order must have at least one item",
            "Shipping address is required",
            "Payment method is required",
        )

    def test_uncalculated_totals(self):
        order = make_order(total=Decimal("0.00"))
        error = unwrap_err(ready_to_confirm(order))
        assert error.problems == ("Order totals not calculated",)


class TestTotals:
    def test_with_totals(self):
        order = make_order()
        assert order.subtotal == Decimal("60.00")
        assert order.total == Decimal("64.35")
        assert order.unit_count == 2

    def test_discount_clamped_to_subtotal(self):
        order = make_order().with_totals(discount=Decimal("500"))
        assert order.discount == Decimal("60.00")
        assert order.total == Decimal("0.00")


class TestExpressShipping:
    def test_large_order(self):
        order = make_order(country="FR", subtotal=Decimal("120.00"))
        assert is_express_shipping_eligible(order)

    def test_domestic_threshold(self):
        assert is_express_shipping_eligible(make_order(country="US"))
        assert not is_express_shipping_eligible(make_order(country="FR"))

    def test_shipped_not_eligible(self):
        assert not is_express_shipping_eligible(make_order(OrderStatus.SHIPPED, subtotal=Decimal("500")))
