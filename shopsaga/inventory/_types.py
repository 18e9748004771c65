"""
Inventory types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum, StrEnum, auto

# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Data
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """Catalog entry. Stock is never negative."""

    id: str
    title: str
    price: Decimal
    stock: int
    category: str = ""

    def has_stock(self, quantity: int) -> bool:
        return self.stock >= quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Movement Log
# ═══════════════════════════════════════════════════════════════════════════════


class StockMovement(StrEnum):
    RESERVE = "reserve"
    RELEASE = "release"
    RESTOCK = "restock"
    ADJUSTMENT = "adjustment"


@dataclass(frozen=True, slots=True)
class InventoryLogEntry:
    product_id: str
    quantity_delta: int  # signed: reserve is negative
    type: StockMovement
    timestamp: datetime
    details: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# Operation Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StockCheck:
    available: bool
    current_stock: int


@dataclass(frozen=True, slots=True)
class Reservation:
    product_id: str
    quantity: int
    remaining: int = 0


@dataclass(frozen=True, slots=True)
class ReservationRecord:
    """Reservations made by one successful batch, in request order."""

    reservations: tuple[Reservation, ...] = ()

    def __iter__(self):
        return iter(self.reservations)

    def __len__(self) -> int:
        return len(self.reservations)

    @property
    def total_units(self) -> int:
        return sum(r.quantity for r in self.reservations)


@dataclass(frozen=True, slots=True)
class StockLevel:
    product_id: str
    stock: int


@dataclass(frozen=True, slots=True)
class RestockReceipt:
    product_id: str
    added: int
    new_stock: int
    capped: bool = False


@dataclass(frozen=True, slots=True)
class Adjustment:
    product_id: str
    old_stock: int
    new_stock: int

    @property
    def difference(self) -> int:
        return self.new_stock - self.old_stock


@dataclass(frozen=True, slots=True)
class RestockOutcome:
    product_id: str
    receipt: RestockReceipt | None = None
    error: InventoryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class BulkRestockReport:
    outcomes: tuple[RestockOutcome, ...]

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class InventoryErrorKind(Enum):
    UNKNOWN_PRODUCT = auto()
    INVALID_QUANTITY = auto()
    INSUFFICIENT_STOCK = auto()
    AT_CAPACITY = auto()
    EXCEEDS_CAPACITY = auto()
    CATALOG_WRITE = auto()


@dataclass(frozen=True, slots=True)
class InventoryError:
    kind: InventoryErrorKind
    product_id: str
    message: str
    available: int = 0


@dataclass(frozen=True, slots=True)
class BatchReservationFailure:
    """First line that could not be reserved; earlier lines were released."""

    product_id: str
    cause: InventoryError
    released: int


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

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
)
