"""
JSON file order store.
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from shopsaga._types import Result, Ok, Error
from shopsaga.orders._types import Order
from shopsaga.storage._store import StoreError, duplicate_order, missing_order

logger = structlog.get_logger(__name__)


class JsonFileOrderStore:
    """
    Orders as one JSON array on disk.

    File I/O runs in a worker thread; writes go to a sibling temp file that
    is then renamed over the target, so a crash never leaves half a file.
    append() and update() read and rewrite the file under a single hold of
    the store lock.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> list[Order]:
        if not self.path.exists():
            return []
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return []
        return [Order.from_dict(item) for item in json.loads(raw)]

    def _write(self, orders: Sequence[Order]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps([o.to_dict() for o in orders], indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def _append(self, order: Order) -> StoreError | None:
        orders = self._read()
        if any(o.order_id == order.order_id for o in orders):
            return duplicate_order(order.order_id)
        self._write([*orders, order])
        return None

    def _update(self, order: Order) -> StoreError | None:
        orders = self._read()
        if not any(o.order_id == order.order_id for o in orders):
            return missing_order(order.order_id)
        self._write([order if o.order_id == order.order_id else o for o in orders])
        return None

    async def load_all(self) -> Result[list[Order], StoreError]:
        async with self._lock:
            try:
                return Ok(await asyncio.to_thread(self._read))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error("Failed to load orders", path=str(self.path), error=str(e))
                return Error(StoreError(f"Failed to load orders from {self.path}", e))

    async def save_all(self, orders: Sequence[Order]) -> Result[None, StoreError]:
        async with self._lock:
            try:
                await asyncio.to_thread(self._write, list(orders))
            except (OSError, TypeError, ValueError) as e:
                logger.error("Failed to save orders", path=str(self.path), error=str(e))
                return Error(StoreError(f"Failed to save orders to {self.path}", e))
            return Ok(None)

    async def append(self, order: Order) -> Result[None, StoreError]:
        async with self._lock:
            try:
                problem = await asyncio.to_thread(self._append, order)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error("Failed to append order", path=str(self.path), order_id=order.order_id, error=str(e))
                return Error(StoreError(f"Failed to save orders to {self.path}", e))
        return Ok(None) if problem is None else Error(problem)

    async def update(self, order: Order) -> Result[None, StoreError]:
        async with self._lock:
            try:
                problem = await asyncio.to_thread(self._update, order)
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.error("Failed to update order", path=str(self.path), order_id=order.order_id, error=str(e))
                return Error(StoreError(f"Failed to save orders to {self.path}", e))
        return Ok(None) if problem is None else Error(problem)


__all__ = ("JsonFileOrderStore",)
