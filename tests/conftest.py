from decimal import Decimal

import pytest

from shopsaga.cart import CartLedger
from shopsaga.checkout import CheckoutOrchestrator
from shopsaga.inventory import InventoryManager, MemoryCatalog, Product
from shopsaga.payments import SimulatedPaymentGateway
from shopsaga.storage import MemoryOrderStore

ADDRESS = {
    "street": "123 Main Street",
    "city": "Springfield",
    "zip": "90210",
    "country": "US",
    "state": "CA",
}


def make_products():
    return [
        Product("p1", "Dune", Decimal("10.00"), stock=10, category="fiction"),
        Product("p2", "Cosmos", Decimal("25.00"), stock=5, category="science"),
        Product("p3", "Last Copy", Decimal("40.00"), stock=1, category="fiction"),
        Product("p4", "Primer", Decimal("0.50"), stock=500, category="education"),
    ]


@pytest.fixture
def catalog():
    return MemoryCatalog(make_products())


@pytest.fixture
def inventory(catalog):
    return InventoryManager(catalog)


@pytest.fixture
def ledger():
    return CartLedger()


@pytest.fixture
def store():
    return MemoryOrderStore()


@pytest.fixture
def gateway():
    return SimulatedPaymentGateway()


@pytest.fixture
def orchestrator(ledger, inventory, store, gateway):
    return CheckoutOrchestrator(
        carts=ledger,
        inventory=inventory,
        orders=store,
        payments=gateway,
    )


@pytest.fixture
def address():
    return dict(ADDRESS)
