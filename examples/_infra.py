"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from shopsaga import (
    CartLedger,
    CheckoutOrchestrator,
    InventoryManager,
    MemoryCatalog,
    MemoryOrderStore,
    Product,
    SimulatedPaymentGateway,
    configure_logging,
)
from shopsaga.payments import PaymentGateway
from shopsaga.policy import CheckoutPolicy


# Fake catalog
def bookshop() -> MemoryCatalog:
    return MemoryCatalog([
        Product("dune", "Dune", Decimal("12.99"), stock=8, category="fiction"),
        Product("cosmos", "Cosmos", Decimal("24.50"), stock=3, category="science"),
        Product("atlas", "World Atlas", Decimal("49.00"), stock=1, category="reference"),
        Product("primer", "Reading Primer", Decimal("4.25"), stock=200, category="education"),
    ])


ADDRESS = {
    "street": "742 Evergreen Terrace",
    "city": "Springfield",
    "zip": "97403",
    "country": "US",
    "state": "OR",
}


# Wiring
def shop(
    *,
    payments: PaymentGateway | None = None,
    policy: CheckoutPolicy | None = None,
) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(
        carts=CartLedger(),
        inventory=InventoryManager(bookshop()),
        orders=MemoryOrderStore(),
        payments=payments or SimulatedPaymentGateway(),
        policy=policy,
    )


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    configure_logging("WARNING")
    asyncio.run(main())
