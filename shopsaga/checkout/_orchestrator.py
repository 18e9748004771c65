"""
Checkout orchestrator — cart to confirmed order as one saga.

    validate ─> load cart ─> stock pre-check ─> price ─> ready_to_confirm
        ─> gateway accepts method ─> reserve batch ─> payment ─> confirm
        ─> persist ─> remove ordered lines from cart
                 ↑             │                     │
                 └── release ──┴─────────────────────┘   (on any failure)

Everything before the reservation is read-only. From the reservation on,
each step runs inside a Transaction, so a failure anywhere later releases
exactly what was reserved. Ordered lines leave the cart only after the order
is saved; lines added meanwhile stay.
"""

from __future__ import annotations

import asyncio
import weakref
from typing import TYPE_CHECKING

import structlog
from kungfu import LazyCoroResult

from shopsaga import saga as S
from shopsaga._types import Result, Ok, Error
from shopsaga.cart import Cart, CartLedger, compute_totals, qualifies_for_free_shipping, validate_stock
from shopsaga.checkout._types import CheckoutResult, OrderDetails
from shopsaga.errors import (
    CheckoutError,
    EmptyCart,
    InsufficientStock,
    InvalidDetails,
    PaymentDeclined,
    PersistenceFailed,
    ReservationFailed,
)
from shopsaga.inventory import InventoryManager, ReservationRecord
from shopsaga.orders import (
    Address,
    Order,
    OrderLine,
    OrderStatus,
    new_order_id,
    ready_to_confirm,
    transition,
)
from shopsaga.payments import PaymentDecision, PaymentGateway
from shopsaga.policy import CheckoutPolicy
from shopsaga.pricing import ZERO, shipping_cost, tax
from shopsaga.validation import validate_address, validate_discount_code, validate_payment_method

if TYPE_CHECKING:
    from shopsaga.storage import OrderStore

logger = structlog.get_logger(__name__)


def _payment_error(e: Exception) -> CheckoutError:
    if isinstance(e, TimeoutError):
        return PaymentDeclined(message="Payment processing failed: timed out", timed_out=True)
    return PaymentDeclined(message=f"Payment processing failed: {e}")


class CheckoutOrchestrator:
    """
    Turns a user's cart into a confirmed, persisted order.

    Checkouts for one user are serialized; different users run
    concurrently and only contend on per-product inventory locks.

    Example:
        orchestrator = CheckoutOrchestrator(
            carts=CartLedger(),
            inventory=InventoryManager(catalog),
            orders=MemoryOrderStore(),
            payments=SimulatedPaymentGateway(),
        )

        result = await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))
        if result.success:
            print(result.order.order_id)
    """

    def __init__(
        self,
        *,
        carts: CartLedger,
        inventory: InventoryManager,
        orders: OrderStore,
        payments: PaymentGateway,
        policy: CheckoutPolicy | None = None,
    ) -> None:
        self.carts = carts
        self.inventory = inventory
        self.orders = orders
        self.payments = payments
        self.policy = policy or CheckoutPolicy()
        # Entries vanish once no checkout holds or awaits the lock.
        self._user_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = self._user_locks[user_id] = asyncio.Lock()
        return lock

    async def checkout(self, user_id: str, details: OrderDetails) -> CheckoutResult:
        log = logger.bind(user_id=user_id)
        async with self._lock_for(user_id):
            match await self._checkout(user_id, details):
                case Ok(order):
                    log.info("Checkout completed", order_id=order.order_id, total=str(order.total))
                    return CheckoutResult.completed(order)
                case Error(error):
                    log.info("Checkout failed", kind=error.kind.name, reason=error.message)
                    return CheckoutResult.failed(error)

    # ═══════════════════════════════════════════════════════════════════════════
    # Read-only Phase
    # ═══════════════════════════════════════════════════════════════════════════

    @staticmethod
    def _validate(details: OrderDetails) -> Result[tuple[Address, str | None], InvalidDetails]:
        raw = details.shipping_address
        check = validate_address(raw)
        if not check.valid:
            return Error(InvalidDetails(message="Invalid shipping address", errors=check.errors))

        if not validate_payment_method(details.payment_method):
            return Error(InvalidDetails(
                message="Invalid payment method",
                errors=("payment_method",),
            ))

        code: str | None = None
        if details.discount_code:
            match validate_discount_code(details.discount_code):
                case Error(reason):
                    return Error(InvalidDetails(message=reason, errors=("discount_code",)))
                case Ok(normalised):
                    code = normalised

        address = raw if isinstance(raw, Address) else Address.from_mapping(raw)  # type: ignore[arg-type]
        return Ok((address, code))

    def _stock_precheck(self, cart: Cart) -> Result[None, InsufficientStock]:
        match validate_stock(cart, self.inventory.check_stock):
            case Ok(_):
                return Ok(None)
            case Error(issues):
                first = issues[0]
                return Error(InsufficientStock(
                    message=f"Insufficient stock for {first.product_id}. Available: {first.available}",
                    product_id=first.product_id,
                    available=first.available,
                ))

    def _price(
        self,
        user_id: str,
        cart: Cart,
        details: OrderDetails,
        address: Address,
        code: str | None,
    ) -> Order:
        """Pending order with cart totals, tax on the discounted amount, and shipping."""
        policy = self.policy
        totals = compute_totals(cart, code)

        region = address.state or policy.default_region
        owed = tax(totals.subtotal - totals.discount, region)

        if qualifies_for_free_shipping(
            cart,
            policy.free_shipping_threshold,
            min_items=policy.free_shipping_min_items,
        ):
            shipping = ZERO
        else:
            shipping = shipping_cost(
                details.weight if details.weight is not None else policy.default_weight,
                details.shipping_zone or policy.default_zone,
                totals.subtotal,
                details.shipping_speed or policy.shipping_speed,
            )

        order = Order(
            order_id=new_order_id(),
            user_id=user_id,
            items=tuple(
                OrderLine(i.product_id, i.quantity, i.unit_price, i.title) for i in cart.items
            ),
            shipping_address=address,
            payment_method=details.payment_method.lower(),
        )
        return order.with_totals(discount=totals.discount, tax=owed, shipping=shipping)

    # ═══════════════════════════════════════════════════════════════════════════
    # Saga Steps
    # ═══════════════════════════════════════════════════════════════════════════

    def _reserve(self, order: Order) -> Result[ReservationRecord, CheckoutError]:
        lines = [(line.product_id, line.quantity) for line in order.items]
        match self.inventory.reserve_batch(lines):
            case Ok(record):
                return Ok(record)
            case Error(failure):
                return Error(ReservationFailed(
                    product_id=failure.product_id,
                    reason=failure.cause.message,
                ))

    def _release(self, record: ReservationRecord) -> Result[int, object]:
        return self.inventory.release_all(record)

    def _payment_step(
        self,
        order: Order,
        method: str,
    ) -> S.SagaStep[PaymentDecision, CheckoutError]:
        timeout = self.policy.payment_timeout.total_seconds()

        async def decide() -> PaymentDecision:
            return await asyncio.wait_for(self.payments.process_payment(order, method), timeout)

        return S.from_async(decide, on_error=_payment_error, name="payment")

    def _persist_step(self, order: Order) -> S.SagaStep[Order, CheckoutError]:
        async def persist() -> Result[Order, CheckoutError]:
            match await self.orders.append(order):
                case Error(e):
                    return Error(PersistenceFailed(message=f"Failed to save order: {e.message}"))
                case Ok(_):
                    return Ok(order)

        return S.step(LazyCoroResult(persist), name="persist")

    # ═══════════════════════════════════════════════════════════════════════════
    # Checkout
    # ═══════════════════════════════════════════════════════════════════════════

    async def _checkout(self, user_id: str, details: OrderDetails) -> Result[Order, CheckoutError]:
        match self._validate(details):
            case Error(e):
                return Error(e)
            case Ok((address, code)):
                pass

        cart = self.carts.get_cart(user_id)
        if cart is None or cart.is_empty():
            return Error(EmptyCart(message="Cannot create order from empty cart"))

        if isinstance(precheck := self._stock_precheck(cart), Error):
            return precheck

        order = self._price(user_id, cart, details, address, code)
        match ready_to_confirm(order):
            case Error(e):
                return Error(e)
            case Ok(_):
                pass

        if not self.payments.accepts(order.payment_method):
            return Error(PaymentDeclined(message="Payment processing failed: Unsupported payment method"))

        tx: S.Transaction[CheckoutError] = S.Transaction(f"checkout:{order.order_id}")

        match tx.apply(lambda: self._reserve(order), self._release, name="reserve"):
            case Error(e):
                return Error(e.error)
            case Ok(_):
                pass

        match await tx.run(self._payment_step(order, details.payment_method)):
            case Error(e):
                return Error(e.error)
            case Ok(decision):
                pass

        if not decision.approved:
            declined = PaymentDeclined(message=f"Payment processing failed: {decision.message}")
            return Error(tx.abort(declined, step="payment").error)

        match transition(order, OrderStatus.CONFIRMED):
            case Error(e):
                return Error(tx.abort(e, step="confirm").error)
            case Ok(confirmed):
                pass

        match await tx.run(self._persist_step(confirmed)):
            case Error(e):
                return Error(e.error)
            case Ok(_):
                pass

        tx.commit()
        self.carts.remove_ordered(user_id, [(line.product_id, line.quantity) for line in order.items])
        return Ok(confirmed)


__all__ = ("CheckoutOrchestrator",)
