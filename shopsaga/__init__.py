"""
shopsaga — all-or-nothing retail checkout.

    from shopsaga import pricing as P   # Pure money arithmetic
    from shopsaga import cart as C      # Carts and totals
    from shopsaga import saga as S      # Compensating transactions
    from shopsaga import orders as O    # Order lifecycle

    orchestrator = CheckoutOrchestrator(
        carts=CartLedger(),
        inventory=InventoryManager(MemoryCatalog(products)),
        orders=MemoryOrderStore(),
        payments=SimulatedPaymentGateway(),
    )
    result = await orchestrator.checkout("alice", OrderDetails(address, "paypal"))
"""

from shopsaga import pricing
from shopsaga import saga
from shopsaga import cart
from shopsaga import inventory
from shopsaga import orders
from shopsaga import storage
from shopsaga import checkout
from shopsaga._logging import configure_logging
from shopsaga._types import Money, Numeric
from shopsaga.cart import CartLedger
from shopsaga.checkout import CheckoutOrchestrator, CheckoutResult, OrderDetails
from shopsaga.inventory import InventoryManager, MemoryCatalog, Product
from shopsaga.orders import Order, OrderDesk, OrderStatus
from shopsaga.payments import SimulatedPaymentGateway
from shopsaga.policy import CheckoutPolicy, InventoryPolicy, OrderPolicy
from shopsaga.storage import JsonFileOrderStore, MemoryOrderStore, SQLAlchemyOrderStore

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "saga",
    "cart",
    "inventory",
    "orders",
    "storage",
    "checkout",
    "configure_logging",
    "Money",
    "Numeric",
    "CartLedger",
    "CheckoutOrchestrator",
    "CheckoutResult",
    "OrderDetails",
    "InventoryManager",
    "MemoryCatalog",
    "Product",
    "Order",
    "OrderDesk",
    "OrderStatus",
    "SimulatedPaymentGateway",
    "CheckoutPolicy",
    "InventoryPolicy",
    "OrderPolicy",
    "JsonFileOrderStore",
    "MemoryOrderStore",
    "SQLAlchemyOrderStore",
)
