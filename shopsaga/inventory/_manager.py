"""
Inventory reservation manager.

Every stock mutation on one product runs under that product's lock, so two
checkouts racing for the last unit cannot both succeed. Reservation and
release are synchronous; only the orchestrator awaits.

    manager = InventoryManager(catalog)

    match manager.reserve_batch([("p1", 2), ("p2", 1)]):
        case Ok(record):
            ...                      # later: manager.release_all(record)
        case Error(failure):
            ...                      # nothing is held; earlier lines released
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from decimal import Decimal

import structlog

from shopsaga._types import Result, Ok, Error
from shopsaga.inventory._catalog import Catalog
from shopsaga.inventory._types import (
    Adjustment,
    BatchReservationFailure,
    BulkRestockReport,
    InventoryError,
    InventoryErrorKind,
    InventoryLogEntry,
    Product,
    Reservation,
    ReservationRecord,
    RestockOutcome,
    RestockReceipt,
    StockCheck,
    StockLevel,
    StockMovement,
)
from shopsaga.policy import InventoryPolicy
from shopsaga.pricing import as_whole, round_money
from shopsaga.saga import Transaction

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InventoryManager:
    def __init__(
        self,
        catalog: Catalog,
        policy: InventoryPolicy | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.catalog = catalog
        self.policy = policy or InventoryPolicy()
        self._clock = clock
        self._log: deque[InventoryLogEntry] = deque(maxlen=self.policy.log_capacity)
        self._log_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    # ═══════════════════════════════════════════════════════════════════════════
    # Locking / Logging
    # ═══════════════════════════════════════════════════════════════════════════

    @contextmanager
    def _locked(self, product_id: str) -> Iterator[None]:
        with self._registry_lock:
            lock = self._locks.setdefault(product_id, threading.Lock())
        with lock:
            yield

    def _record(
        self,
        product_id: str,
        delta: int,
        movement: StockMovement,
        details: str = "",
    ) -> None:
        entry = InventoryLogEntry(product_id, delta, movement, self._clock(), details)
        with self._log_lock:
            self._log.append(entry)

    def _product(self, product_id: str) -> Result[Product, InventoryError]:
        product = self.catalog.get_product(product_id)
        if product is None:
            return Error(InventoryError(
                InventoryErrorKind.UNKNOWN_PRODUCT, product_id, "Product not found",
            ))
        return Ok(product)

    def _write(self, product_id: str, stock: int) -> Result[None, InventoryError]:
        if not self.catalog.set_stock(product_id, stock):
            return Error(InventoryError(
                InventoryErrorKind.CATALOG_WRITE, product_id, "Failed to update stock",
            ))
        return Ok(None)

    @staticmethod
    def _quantity(product_id: str, quantity: object) -> Result[int, InventoryError]:
        units = as_whole(quantity)
        if units is None or units <= 0:
            return Error(InventoryError(
                InventoryErrorKind.INVALID_QUANTITY,
                product_id,
                "Quantity must be a positive whole number",
            ))
        return Ok(units)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    def check_stock(self, product_id: str, quantity: int) -> StockCheck:
        """Whether quantity could be reserved right now. Never mutates."""
        product = self.catalog.get_product(product_id)
        if product is None:
            return StockCheck(available=False, current_stock=0)
        units = as_whole(quantity)
        ok = units is not None and units > 0 and product.has_stock(units)
        return StockCheck(available=ok, current_stock=product.stock)

    def stock_level(self, product_id: str) -> int | None:
        product = self.catalog.get_product(product_id)
        return product.stock if product is not None else None

    def stock_value(self, product_id: str) -> Decimal | None:
        """price × stock for one product, or None if unknown."""
        product = self.catalog.get_product(product_id)
        if product is None:
            return None
        return round_money(product.price * product.stock)

    def history(self, product_id: str | None = None, limit: int = 50) -> list[InventoryLogEntry]:
        """Newest first, optionally filtered to one product."""
        with self._log_lock:
            entries = list(self._log)
        if product_id is not None:
            entries = [e for e in entries if e.product_id == product_id]
        entries.reverse()
        return entries[:max(limit, 0)]

    # ═══════════════════════════════════════════════════════════════════════════
    # Reserve / Release
    # ═══════════════════════════════════════════════════════════════════════════

    def reserve(self, product_id: str, quantity: int) -> Result[Reservation, InventoryError]:
        match self._quantity(product_id, quantity):
            case Error(e):
                return Error(e)
            case Ok(units):
                pass

        with self._locked(product_id):
            match self._product(product_id):
                case Error(e):
                    return Error(e)
                case Ok(product):
                    pass

            if product.stock < units:
                logger.info(
                    "Reservation refused",
                    product_id=product_id,
                    requested=units,
                    available=product.stock,
                )
                return Error(InventoryError(
                    InventoryErrorKind.INSUFFICIENT_STOCK,
                    product_id,
                    f"Insufficient stock. Available: {product.stock}",
                    available=product.stock,
                ))

            remaining = product.stock - units
            if isinstance(written := self._write(product_id, remaining), Error):
                return written
            self._record(product_id, -units, StockMovement.RESERVE, "Reserved for order")

        logger.debug("Stock reserved", product_id=product_id, quantity=units, remaining=remaining)
        return Ok(Reservation(product_id, units, remaining))

    def release(self, product_id: str, quantity: int) -> Result[StockLevel, InventoryError]:
        """Return stock. Deliberately unbounded: releases never fail on max_stock."""
        match self._quantity(product_id, quantity):
            case Error(e):
                return Error(e)
            case Ok(units):
                pass

        with self._locked(product_id):
            match self._product(product_id):
                case Error(e):
                    return Error(e)
                case Ok(product):
                    pass

            new_stock = product.stock + units
            if isinstance(written := self._write(product_id, new_stock), Error):
                return written
            self._record(product_id, units, StockMovement.RELEASE, "Released from order")

        logger.debug("Stock released", product_id=product_id, quantity=units, stock=new_stock)
        return Ok(StockLevel(product_id, new_stock))

    def _release_reservation(self, reservation: Reservation) -> Result[StockLevel, InventoryError]:
        return self.release(reservation.product_id, reservation.quantity)

    def reserve_batch(
        self,
        items: Iterable[tuple[str, int]],
    ) -> Result[ReservationRecord, BatchReservationFailure]:
        """
        Reserve every (product_id, quantity) in order, all or nothing.

        On the first failure, everything reserved so far in this batch is
        released (newest first) before returning. If that release itself
        fails, RollbackFailed is raised: stock is then in an unknown state.
        """
        tx: Transaction[InventoryError] = Transaction("reserve_batch")
        reservations: list[Reservation] = []

        for product_id, quantity in items:
            outcome = tx.apply(
                lambda pid=product_id, qty=quantity: self.reserve(pid, qty),
                self._release_reservation,
                name=f"reserve:{product_id}",
            )
            match outcome:
                case Ok(reservation):
                    reservations.append(reservation)
                case Error(failure):
                    logger.warning(
                        "Batch reservation failed",
                        product_id=product_id,
                        reason=failure.error.message,
                        released=failure.compensators_run,
                    )
                    return Error(BatchReservationFailure(
                        product_id=product_id,
                        cause=failure.error,
                        released=failure.compensators_run,
                    ))

        tx.commit()
        return Ok(ReservationRecord(tuple(reservations)))

    def release_all(self, record: ReservationRecord) -> Result[int, InventoryError]:
        """
        Compensation for a committed batch: release every reservation.

        Attempts all of them; returns the first error if any failed.
        """
        first_error: InventoryError | None = None
        released = 0
        for reservation in reversed(record.reservations):
            match self._release_reservation(reservation):
                case Ok(_):
                    released += 1
                case Error(e):
                    logger.error(
                        "Release failed",
                        product_id=reservation.product_id,
                        quantity=reservation.quantity,
                        reason=e.message,
                    )
                    first_error = first_error or e
        if first_error is not None:
            return Error(first_error)
        return Ok(released)

    # ═══════════════════════════════════════════════════════════════════════════
    # Restock / Adjust
    # ═══════════════════════════════════════════════════════════════════════════

    def restock(
        self,
        product_id: str,
        quantity: int,
        max_stock: int | None = None,
        auto_adjust: bool = False,
    ) -> Result[RestockReceipt, InventoryError]:
        """
        Add stock up to max_stock.

        With auto_adjust, an overflowing restock is capped at max_stock
        (and fails only if the product is already there); without it the
        whole restock is refused.
        """
        ceiling = self.policy.max_stock if max_stock is None else max_stock
        match self._quantity(product_id, quantity):
            case Error(e):
                return Error(e)
            case Ok(units):
                pass

        with self._locked(product_id):
            match self._product(product_id):
                case Error(e):
                    return Error(e)
                case Ok(product):
                    pass

            added = units
            if product.stock + units > ceiling:
                if not auto_adjust:
                    return Error(InventoryError(
                        InventoryErrorKind.EXCEEDS_CAPACITY,
                        product_id,
                        f"Restocking would exceed maximum stock level ({ceiling})",
                        available=product.stock,
                    ))
                added = ceiling - product.stock
                if added <= 0:
                    return Error(InventoryError(
                        InventoryErrorKind.AT_CAPACITY,
                        product_id,
                        "Product already at maximum stock level",
                        available=product.stock,
                    ))

            new_stock = product.stock + added
            if isinstance(written := self._write(product_id, new_stock), Error):
                return written
            capped = added != units
            self._record(
                product_id,
                added,
                StockMovement.RESTOCK,
                f"Restocked {product.stock} -> {new_stock}" + (" (capped)" if capped else ""),
            )

        logger.info("Product restocked", product_id=product_id, added=added, stock=new_stock)
        return Ok(RestockReceipt(product_id, added, new_stock, capped=capped))

    def bulk_restock(
        self,
        entries: Iterable[tuple[str, int]],
        max_stock: int | None = None,
        auto_adjust: bool = False,
    ) -> BulkRestockReport:
        """Restock each entry independently; one failure never stops the rest."""
        outcomes: list[RestockOutcome] = []
        for product_id, quantity in entries:
            match self.restock(product_id, quantity, max_stock, auto_adjust):
                case Ok(receipt):
                    outcomes.append(RestockOutcome(product_id, receipt=receipt))
                case Error(e):
                    outcomes.append(RestockOutcome(product_id, error=e))
        report = BulkRestockReport(tuple(outcomes))
        logger.info("Bulk restock finished", succeeded=report.succeeded, failed=report.failed)
        return report

    def adjust_stock(
        self,
        product_id: str,
        new_stock: int,
        reason: str = "",
    ) -> Result[Adjustment, InventoryError]:
        """Set stock directly (stock-take correction). Logs the signed difference."""
        level = as_whole(new_stock)
        if level is None or level < 0:
            return Error(InventoryError(
                InventoryErrorKind.INVALID_QUANTITY, product_id, "Invalid stock level",
            ))

        with self._locked(product_id):
            match self._product(product_id):
                case Error(e):
                    return Error(e)
                case Ok(product):
                    pass

            if isinstance(written := self._write(product_id, level), Error):
                return written
            adjustment = Adjustment(product_id, product.stock, level)
            self._record(
                product_id,
                adjustment.difference,
                StockMovement.ADJUSTMENT,
                reason or "Manual adjustment",
            )

        logger.info(
            "Stock adjusted",
            product_id=product_id,
            old_stock=adjustment.old_stock,
            new_stock=level,
            reason=reason or "Manual adjustment",
        )
        return Ok(adjustment)


__all__ = ("InventoryManager",)
