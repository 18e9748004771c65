"""End-to-end tests for the checkout saga."""

import asyncio
import gc
from decimal import Decimal

import pytest
import structlog.testing
from helpers import unwrap
from kungfu import Error, Ok

from shopsaga import cart as C
from shopsaga.checkout import CheckoutOrchestrator, OrderDetails
from shopsaga.errors import (
    EmptyCart,
    ErrorKind,
    InsufficientStock,
    InvalidDetails,
    PaymentDeclined,
    PersistenceFailed,
    ReservationFailed,
)
from shopsaga.inventory import InventoryManager, MemoryCatalog, StockCheck, StockMovement
from shopsaga.orders import OrderStatus
from shopsaga.payments import PaymentDecision, SimulatedPaymentGateway
from shopsaga.policy import CheckoutPolicy
from shopsaga.storage import JsonFileOrderStore, MemoryOrderStore, StoreError

from conftest import make_products


def fill(ledger, inventory, user_id, *lines):
    cart = ledger.get_or_create_cart(user_id)
    for product_id, quantity in lines:
        product = inventory.catalog.get_product(product_id)
        unwrap(C.add_item(cart, product_id, quantity, product.price, product.title))
    return cart


class RefusingCatalog(MemoryCatalog):
    def __init__(self, products, refuse):
        super().__init__(products)
        self.refuse = set(refuse)

    def set_stock(self, product_id, stock):
        if product_id in self.refuse:
            return False
        return super().set_stock(product_id, stock)


class AnyMethodGateway:
    def accepts(self, method):
        return True


class SlowGateway(AnyMethodGateway):
    async def process_payment(self, order, method):
        await asyncio.sleep(5)
        return PaymentDecision(True, "Payment processed", "TXN-LATE")


class RaisingGateway(AnyMethodGateway):
    async def process_payment(self, order, method):
        raise ConnectionError("gateway unreachable")


class DecliningGateway(AnyMethodGateway):
    async def process_payment(self, order, method):
        return PaymentDecision(False, "Card declined")


class CartEditingGateway(SimulatedPaymentGateway):
    """Adds a line to the shopper's cart while the payment is in flight."""

    def __init__(self, ledger, line):
        super().__init__()
        self.ledger = ledger
        self.line = line

    async def process_payment(self, order, method):
        product_id, quantity, price = self.line
        unwrap(C.add_item(self.ledger.get_cart(order.user_id), product_id, quantity, Decimal(price)))
        return await super().process_payment(order, method)


class StaleInventory(InventoryManager):
    """Pre-check answers from a snapshot taken before anyone reserved."""

    def check_stock(self, product_id, quantity):
        return StockCheck(available=True, current_stock=self.stock_level(product_id) or 0)


class UnsaveableStore(MemoryOrderStore):
    async def append(self, order):
        return Error(StoreError("disk full"))


@pytest.fixture(params=["memory", "json"])
def order_store(request, tmp_path):
    if request.param == "json":
        return JsonFileOrderStore(tmp_path / "orders.json")
    return MemoryOrderStore()


def build(ledger, inventory, *, store=None, gateway=None, policy=None):
    return CheckoutOrchestrator(
        carts=ledger,
        inventory=inventory,
        orders=store or MemoryOrderStore(),
        payments=gateway or SimulatedPaymentGateway(),
        policy=policy,
    )


class TestHappyPath:
    @pytest.mark.asyncio
    async def test_confirms_and_persists(self, orchestrator, ledger, inventory, store, address):
        fill(ledger, inventory, "alice", ("p1", 3))

        result = await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))

        assert result.success
        assert result.message == "Order created successfully"
        order = result.order
        assert order.status is OrderStatus.CONFIRMED
        assert order.subtotal == Decimal("30.00")
        assert order.discount == Decimal("0.00")
        assert order.tax == Decimal("2.18")
        assert order.shipping == Decimal("5.00")
        assert order.total == Decimal("37.18")
        assert order.order_id.startswith("ORD-")

        assert inventory.stock_level("p1") == 7
        assert ledger.get_cart("alice").is_empty()
        assert [o.order_id for o in unwrap(await store.load_all())] == [order.order_id]
        assert store.saves == 1

    @pytest.mark.asyncio
    async def test_lines_added_during_payment_stay_in_cart(self, ledger, inventory, address):
        gateway = CartEditingGateway(ledger, ("p2", 1, "25.00"))
        fill(ledger, inventory, "alice", ("p1", 2))

        result = await build(ledger, inventory, gateway=gateway).checkout(
            "alice", OrderDetails(address, "credit_card"),
        )

        assert [(line.product_id, line.quantity) for line in result.order.items] == [("p1", 2)]
        cart = ledger.get_cart("alice")
        assert [(i.product_id, i.quantity) for i in cart.items] == [("p2", 1)]

    @pytest.mark.asyncio
    async def test_discount_code_and_free_shipping(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p2", 3))

        result = await orchestrator.checkout(
            "alice", OrderDetails(address, "paypal", discount_code="save10"),
        )

        order = result.order
        assert order.subtotal == Decimal("75.00")
        assert order.discount == Decimal("7.50")
        assert order.tax == Decimal("4.89")
        assert order.shipping == Decimal("0.00")
        assert order.total == Decimal("72.39")

    @pytest.mark.asyncio
    async def test_many_cheap_items_ship_free(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p4", 12))
        result = await orchestrator.checkout("alice", OrderDetails(address, "debit_card"))
        assert result.order.shipping == 0

    @pytest.mark.asyncio
    async def test_policy_shipping_parameters(self, ledger, inventory, address):
        policy = CheckoutPolicy().with_shipping(zone="national", speed="expedited")
        fill(ledger, inventory, "alice", ("p1", 1))

        result = await build(ledger, inventory, policy=policy).checkout(
            "alice", OrderDetails(address, "credit_card"),
        )

        assert result.order.shipping == Decimal("22.50")


class TestRejectedBeforeReservation:
    @pytest.mark.asyncio
    async def test_empty_cart(self, orchestrator, store, address):
        result = await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))

        assert not result.success
        assert isinstance(result.error, EmptyCart)
        assert result.message == "Cannot create order from empty cart"
        assert store.saves == 0

    @pytest.mark.asyncio
    async def test_invalid_address(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p1", 1))
        address["zip"] = "12"

        result = await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))

        assert isinstance(result.error, InvalidDetails)
        assert result.message == "Invalid shipping address"
        assert result.error.errors == ("zip",)
        assert inventory.stock_level("p1") == 10

    @pytest.mark.asyncio
    async def test_missing_address(self, orchestrator, ledger, inventory):
        fill(ledger, inventory, "alice", ("p1", 1))
        result = await orchestrator.checkout("alice", OrderDetails(None, "credit_card"))
        assert result.error.kind is ErrorKind.INVALID_DETAILS

    @pytest.mark.asyncio
    async def test_unknown_payment_method(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p1", 1))
        result = await orchestrator.checkout("alice", OrderDetails(address, "bitcoin"))
        assert result.error.errors == ("payment_method",)

    @pytest.mark.asyncio
    async def test_malformed_discount_code(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p1", 1))
        result = await orchestrator.checkout(
            "alice", OrderDetails(address, "credit_card", discount_code="a!"),
        )
        assert result.error.errors == ("discount_code",)

    @pytest.mark.asyncio
    async def test_insufficient_stock(self, orchestrator, ledger, inventory, store, address):
        fill(ledger, inventory, "alice", ("p1", 2), ("p3", 2))

        result = await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))

        assert isinstance(result.error, InsufficientStock)
        assert result.error.product_id == "p3"
        assert result.error.available == 1
        assert inventory.stock_level("p1") == 10
        assert inventory.stock_level("p3") == 1
        assert store.saves == 0
        assert not ledger.get_cart("alice").is_empty()

    @pytest.mark.asyncio
    async def test_method_gateway_cannot_charge(self, orchestrator, ledger, inventory, store, address):
        fill(ledger, inventory, "alice", ("p1", 3))

        result = await orchestrator.checkout("alice", OrderDetails(address, "bank_transfer"))

        assert isinstance(result.error, PaymentDeclined)
        assert result.message == "Payment processing failed: Unsupported payment method"
        assert inventory.history() == []
        assert inventory.stock_level("p1") == 10
        assert store.saves == 0
        assert C.item_count(ledger.get_cart("alice")) == 3


class TestRolledBack:
    @pytest.mark.asyncio
    async def test_reservation_failure_releases_earlier_lines(self, ledger, address):
        inventory = InventoryManager(RefusingCatalog(make_products(), refuse={"p2"}))
        fill(ledger, inventory, "alice", ("p1", 2), ("p2", 1))

        result = await build(ledger, inventory).checkout("alice", OrderDetails(address, "credit_card"))

        assert isinstance(result.error, ReservationFailed)
        assert result.error.product_id == "p2"
        assert inventory.stock_level("p1") == 10

    @pytest.mark.asyncio
    async def test_declined_payment_returns_stock(self, ledger, inventory, address):
        store = MemoryOrderStore()
        fill(ledger, inventory, "alice", ("p1", 3))

        result = await build(ledger, inventory, store=store, gateway=DecliningGateway()).checkout(
            "alice", OrderDetails(address, "credit_card"),
        )

        assert isinstance(result.error, PaymentDeclined)
        assert result.message == "Payment processing failed: Card declined"
        assert not result.error.timed_out
        assert inventory.stock_level("p1") == 10
        assert [e.type for e in inventory.history("p1")] == [StockMovement.RELEASE, StockMovement.RESERVE]
        assert store.saves == 0
        assert C.item_count(ledger.get_cart("alice")) == 3

    @pytest.mark.asyncio
    async def test_payment_timeout(self, ledger, inventory, address):
        policy = CheckoutPolicy().with_payment_timeout(seconds=0.05)
        fill(ledger, inventory, "alice", ("p1", 1))

        result = await build(ledger, inventory, gateway=SlowGateway(), policy=policy).checkout(
            "alice", OrderDetails(address, "credit_card"),
        )

        assert isinstance(result.error, PaymentDeclined)
        assert result.error.timed_out
        assert inventory.stock_level("p1") == 10

    @pytest.mark.asyncio
    async def test_gateway_exception(self, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p1", 1))

        result = await build(ledger, inventory, gateway=RaisingGateway()).checkout(
            "alice", OrderDetails(address, "credit_card"),
        )

        assert isinstance(result.error, PaymentDeclined)
        assert "gateway unreachable" in result.message
        assert inventory.stock_level("p1") == 10

    @pytest.mark.asyncio
    async def test_persistence_failure(self, ledger, inventory, address):
        store = UnsaveableStore()
        fill(ledger, inventory, "alice", ("p1", 4))

        result = await build(ledger, inventory, store=store).checkout(
            "alice", OrderDetails(address, "credit_card"),
        )

        assert isinstance(result.error, PersistenceFailed)
        assert "disk full" in result.message
        assert inventory.stock_level("p1") == 10
        assert C.item_count(ledger.get_cart("alice")) == 4


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_last_unit_sold_once(self, ledger, address, order_store):
        inventory = StaleInventory(MemoryCatalog(make_products()))
        orchestrator = build(
            ledger, inventory, store=order_store, gateway=SimulatedPaymentGateway(delay=0.02),
        )
        fill(ledger, inventory, "alice", ("p3", 1))
        fill(ledger, inventory, "bob", ("p3", 1))

        results = await asyncio.gather(
            orchestrator.checkout("alice", OrderDetails(address, "credit_card")),
            orchestrator.checkout("bob", OrderDetails(address, "credit_card")),
        )

        assert sorted(r.success for r in results) == [False, True]
        winner = next(r for r in results if r.success)
        loser = next(r for r in results if not r.success)
        assert isinstance(loser.error, ReservationFailed)
        assert loser.error.product_id == "p3"
        assert inventory.stock_level("p3") == 0
        stored = unwrap(await order_store.load_all())
        assert [o.order_id for o in stored] == [winner.order.order_id]

    @pytest.mark.asyncio
    async def test_overlapping_checkouts_all_persist(self, ledger, inventory, address, order_store):
        orchestrator = build(
            ledger, inventory, store=order_store, gateway=SimulatedPaymentGateway(delay=0.02),
        )
        fill(ledger, inventory, "alice", ("p1", 1))
        fill(ledger, inventory, "bob", ("p2", 1))
        fill(ledger, inventory, "carol", ("p4", 3))

        results = await asyncio.gather(
            orchestrator.checkout("alice", OrderDetails(address, "credit_card")),
            orchestrator.checkout("bob", OrderDetails(address, "paypal")),
            orchestrator.checkout("carol", OrderDetails(address, "debit_card")),
        )

        assert all(r.success for r in results)
        stored = unwrap(await order_store.load_all())
        assert sorted(o.order_id for o in stored) == sorted(r.order.order_id for r in results)

    @pytest.mark.asyncio
    async def test_user_lock_dropped_when_idle(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p1", 1))

        await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))
        gc.collect()

        assert "alice" not in orchestrator._user_locks

    @pytest.mark.asyncio
    async def test_same_user_checkouts_serialize(self, ledger, inventory, address):
        store = MemoryOrderStore()
        orchestrator = build(ledger, inventory, store=store, gateway=SimulatedPaymentGateway(delay=0.01))
        fill(ledger, inventory, "alice", ("p1", 2))

        first, second = await asyncio.gather(
            orchestrator.checkout("alice", OrderDetails(address, "credit_card")),
            orchestrator.checkout("alice", OrderDetails(address, "credit_card")),
        )

        assert first.success
        assert isinstance(second.error, EmptyCart)
        assert inventory.stock_level("p1") == 8
        match await store.load_all():
            case Ok(orders):
                assert len(orders) == 1


class TestLogging:
    @pytest.mark.asyncio
    async def test_outcomes_are_logged(self, orchestrator, ledger, inventory, address):
        fill(ledger, inventory, "alice", ("p1", 1))
        with structlog.testing.capture_logs() as logs:
            await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))
            await orchestrator.checkout("alice", OrderDetails(address, "credit_card"))

        events = [(e["event"], e.get("user_id")) for e in logs if e["log_level"] == "info"]
        assert ("Checkout completed", "alice") in events
        assert ("Checkout failed", "alice") in events
