"""
Order store — typed storage protocol.

Checkout adds an order with append(); the order desk rewrites one order
with update(). Each is a single locked write, so concurrent callers never
see each other's half-finished read-modify-write. load_all/save_all stay
for bulk reads and imports. All methods return Result for explicit error
handling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from shopsaga._types import Result, Ok, Error
from shopsaga.orders._types import Order

# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


def missing_order(order_id: str) -> StoreError:
    return StoreError(f"Order {order_id} is not stored")


def duplicate_order(order_id: str) -> StoreError:
    return StoreError(f"Order {order_id} is already stored")


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol — Result-based
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStore(Protocol):
    """
    Order persistence protocol.

    Example — custom implementation:

        class RedisOrderStore:
            async def load_all(self) -> Result[list[Order], StoreError]:
                try:
                    raw = await self.client.hvals("orders")
                    return Ok(sorted(
                        (Order.from_dict(json.loads(r)) for r in raw),
                        key=lambda o: o.created_at,
                    ))
                except Exception as e:
                    return Error(StoreError("Failed to load orders", e))

            async def append(self, order: Order) -> Result[None, StoreError]:
                added = await self.client.hsetnx("orders", order.order_id, json.dumps(order.to_dict()))
                return Ok(None) if added else Error(StoreError("duplicate"))

            ...
    """

    async def load_all(self) -> Result[list[Order], StoreError]:
        """Every stored order, in insertion order."""
        ...

    async def save_all(self, orders: Sequence[Order]) -> Result[None, StoreError]:
        """Replace the stored collection with orders."""
        ...

    async def append(self, order: Order) -> Result[None, StoreError]:
        """Add one new order. Fails if its id is already stored."""
        ...

    async def update(self, order: Order) -> Result[None, StoreError]:
        """Overwrite the stored order with the same id. Fails if there is none."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store — Default Implementation
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryOrderStore:
    """
    In-memory order store.

    Orders are immutable, so holding references is safe; the list itself is
    copied on the way in and out. `saves` counts every successful write.

    Example:
        store = MemoryOrderStore()
        orchestrator = CheckoutOrchestrator(..., orders=store)
    """

    def __init__(self, orders: Sequence[Order] = ()) -> None:
        self._orders: list[Order] = list(orders)
        self._lock = asyncio.Lock()
        self.saves = 0

    async def load_all(self) -> Result[list[Order], StoreError]:
        async with self._lock:
            return Ok(list(self._orders))

    async def save_all(self, orders: Sequence[Order]) -> Result[None, StoreError]:
        async with self._lock:
            self._orders = list(orders)
            self.saves += 1
            return Ok(None)

    async def append(self, order: Order) -> Result[None, StoreError]:
        async with self._lock:
            if any(o.order_id == order.order_id for o in self._orders):
                return Error(duplicate_order(order.order_id))
            self._orders.append(order)
            self.saves += 1
            return Ok(None)

    async def update(self, order: Order) -> Result[None, StoreError]:
        async with self._lock:
            for i, stored in enumerate(self._orders):
                if stored.order_id == order.order_id:
                    self._orders[i] = order
                    self.saves += 1
                    return Ok(None)
            return Error(missing_order(order.order_id))


__all__ = ("StoreError", "OrderStore", "MemoryOrderStore")
