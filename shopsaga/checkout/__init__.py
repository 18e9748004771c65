"""
Checkout — the all-or-nothing cart-to-order saga.
"""

from shopsaga.checkout._types import OrderDetails, CheckoutResult
from shopsaga.checkout._orchestrator import CheckoutOrchestrator

__all__ = ("OrderDetails", "CheckoutResult", "CheckoutOrchestrator")
