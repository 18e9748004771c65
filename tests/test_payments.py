"""Tests for the simulated payment gateway."""

from decimal import Decimal

import pytest

from shopsaga.orders import Order, OrderLine
from shopsaga.payments import SimulatedPaymentGateway


def order_for(price):
    return Order(
        order_id="ORD-1",
        user_id="alice",
        items=(OrderLine("p1", 1, Decimal(price)),),
    ).with_totals()


class TestSimulatedGateway:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["credit_card", "DEBIT_CARD", "paypal", "cash_on_delivery"])
    async def test_approves_supported_methods(self, method):
        decision = await SimulatedPaymentGateway().process_payment(order_for("10.00"), method)
        assert decision.approved
        assert decision.message == "Payment processed"
        assert decision.transaction_id.startswith("TXN-")

    @pytest.mark.asyncio
    async def test_declines_other_methods(self):
        decision = await SimulatedPaymentGateway().process_payment(order_for("10.00"), "bank_transfer")
        assert not decision.approved
        assert decision.message == "Unsupported payment method"
        assert decision.transaction_id is None

    @pytest.mark.asyncio
    async def test_declines_zero_total(self):
        decision = await SimulatedPaymentGateway().process_payment(order_for("0"), "credit_card")
        assert not decision.approved
        assert decision.message == "Invalid payment amount"

    @pytest.mark.asyncio
    async def test_delay(self):
        gateway = SimulatedPaymentGateway(delay=0.01)
        assert (await gateway.process_payment(order_for("5.00"), "paypal")).approved

    def test_accepts(self):
        gateway = SimulatedPaymentGateway()
        assert gateway.accepts("PayPal")
        assert not gateway.accepts("bank_transfer")
