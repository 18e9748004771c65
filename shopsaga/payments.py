"""
Payments — the decision collaborator the checkout awaits.

No real gateway is wired in; SimulatedPaymentGateway decides from the
payment method and order total alone.
"""

from __future__ import annotations

import asyncio
import secrets
from dataclasses import dataclass
from typing import Protocol

import structlog

from shopsaga.orders import Order

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PaymentDecision:
    approved: bool
    message: str
    transaction_id: str | None = None


class PaymentGateway(Protocol):
    def accepts(self, method: str) -> bool:
        """Whether the gateway can charge this method at all. Checked before stock is reserved."""
        ...

    async def process_payment(self, order: Order, method: str) -> PaymentDecision:
        """Approve or decline. May raise; the checkout treats that as a decline."""
        ...


APPROVED_METHODS = frozenset({"credit_card", "debit_card", "paypal", "cash_on_delivery"})


class SimulatedPaymentGateway:
    """
    Approves card, PayPal and cash-on-delivery payments for positive totals.

    Example:
        gateway = SimulatedPaymentGateway(delay=0.1)   # simulate latency
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay

    def accepts(self, method: str) -> bool:
        return method.lower() in APPROVED_METHODS

    async def process_payment(self, order: Order, method: str) -> PaymentDecision:
        if self.delay:
            await asyncio.sleep(self.delay)

        if order.total <= 0:
            decision = PaymentDecision(False, "Invalid payment amount")
        elif self.accepts(method):
            decision = PaymentDecision(True, "Payment processed", f"TXN-{secrets.token_hex(6).upper()}")
        else:
            decision = PaymentDecision(False, "Unsupported payment method")

        logger.info(
            "Payment decided",
            order_id=order.order_id,
            method=method,
            approved=decision.approved,
        )
        return decision


__all__ = (
    "PaymentDecision",
    "PaymentGateway",
    "APPROVED_METHODS",
    "SimulatedPaymentGateway",
)
