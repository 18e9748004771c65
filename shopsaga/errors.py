"""
Checkout error kinds — values, not exceptions.

Every fallible operation in the checkout path returns Result[T, CheckoutError].
Callers dispatch on the concrete class (or on .kind when crossing a boundary
that only wants a tag).

Example:
    match await orchestrator.checkout(user_id, details):
        case CheckoutResult(success=True, order=order):
            ...
        case CheckoutResult(error=InsufficientStock(product_id=pid, available=n)):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar


class ErrorKind(Enum):
    INVALID_DETAILS = auto()
    EMPTY_CART = auto()
    INSUFFICIENT_STOCK = auto()
    RESERVATION_FAILED = auto()
    PAYMENT_DECLINED = auto()
    PERSISTENCE_FAILED = auto()
    INVALID_TRANSITION = auto()
    ORDER_NOT_READY = auto()
    ORDER_NOT_FOUND = auto()
    NOT_ORDER_OWNER = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True, kw_only=True)
class CheckoutError:
    """Base for every checkout/order failure."""

    kind: ClassVar[ErrorKind]
    message: str

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Failures
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidDetails(CheckoutError):
    """Address, payment method or discount code failed validation."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_DETAILS
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class EmptyCart(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.EMPTY_CART
    message: str = "Cart is empty"


@dataclass(frozen=True, slots=True, kw_only=True)
class InsufficientStock(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.INSUFFICIENT_STOCK
    product_id: str
    available: int


@dataclass(frozen=True, slots=True, kw_only=True)
class ReservationFailed(CheckoutError):
    """Batch reservation hit a line it could not reserve; batch rolled back."""

    kind: ClassVar[ErrorKind] = ErrorKind.RESERVATION_FAILED
    message: str = "Failed to reserve inventory: stock unavailable"
    product_id: str = ""
    reason: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class PaymentDeclined(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.PAYMENT_DECLINED
    timed_out: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class PersistenceFailed(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.PERSISTENCE_FAILED


# ═══════════════════════════════════════════════════════════════════════════════
# Order Lifecycle Failures
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidTransition(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_TRANSITION
    current: str
    attempted: str


@dataclass(frozen=True, slots=True, kw_only=True)
class OrderNotReady(CheckoutError):
    """Every reason the order cannot be confirmed, not just the first."""

    kind: ClassVar[ErrorKind] = ErrorKind.ORDER_NOT_READY
    problems: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class OrderNotFound(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.ORDER_NOT_FOUND
    order_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class NotOrderOwner(CheckoutError):
    kind: ClassVar[ErrorKind] = ErrorKind.NOT_ORDER_OWNER
    message: str = "Unauthorized to modify this order"
    order_id: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ErrorKind",
    "CheckoutError",
    "InvalidDetails",
    "EmptyCart",
    "InsufficientStock",
    "ReservationFailed",
    "PaymentDeclined",
    "PersistenceFailed",
    "InvalidTransition",
    "OrderNotReady",
    "OrderNotFound",
    "NotOrderOwner",
)
