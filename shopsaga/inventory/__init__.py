"""
Inventory — per-product serialized stock reservation with batch rollback.

    from shopsaga.inventory import InventoryManager, MemoryCatalog, Product

    manager = InventoryManager(MemoryCatalog([Product("p1", "Dune", Decimal("10"), 5)]))
    manager.reserve("p1", 2)          # Ok(Reservation("p1", 2, remaining=3))
    manager.history("p1")             # newest first
"""

from shopsaga.inventory._types import (
    Product,
    StockMovement,
    InventoryLogEntry,
    StockCheck,
    Reservation,
    ReservationRecord,
    StockLevel,
    RestockReceipt,
    Adjustment,
    RestockOutcome,
    BulkRestockReport,
    InventoryErrorKind,
    InventoryError,
    BatchReservationFailure,
)
from shopsaga.inventory._catalog import Catalog, MemoryCatalog
from shopsaga.inventory._manager import InventoryManager

__all__ = (
    "Product",
    "StockMovement",
    "InventoryLogEntry",
    "StockCheck",
    "Reservation",
    "ReservationRecord",
    "StockLevel",
    "RestockReceipt",
    "Adjustment",
    "RestockOutcome",
    "BulkRestockReport",
    "InventoryErrorKind",
    "InventoryError",
    "BatchReservationFailure",
    "Catalog",
    "MemoryCatalog",
    "InventoryManager",
)
