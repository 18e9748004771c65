"""
SQLAlchemy integration — async order store.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///orders.db")
    store = SQLAlchemyOrderStore(session_factory)

    orchestrator = CheckoutOrchestrator(..., orders=store)

Each order is one row: a few queryable columns plus the full order as JSON.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy import DateTime, String, Text, delete, select, update as sa_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from shopsaga._types import Result, Ok, Error
from shopsaga.orders._types import Order
from shopsaga.storage._store import StoreError, duplicate_order, missing_order

logger = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Base / Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class OrderRow(Base):
    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    # Money as text: SQLite has no exact decimal type.
    total: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    @classmethod
    def from_order(cls, order: Order) -> OrderRow:
        return cls(
            order_id=order.order_id,
            user_id=order.user_id,
            status=order.status.value,
            total=str(order.total),
            created_at=order.created_at,
            payload=json.dumps(order.to_dict()),
        )

    def to_order(self) -> Order:
        return Order.from_dict(json.loads(self.payload))


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyOrderStore:
    """
    Order store backed by an async SQLAlchemy session factory.

    append() inserts one row and update() rewrites one row, each in its own
    transaction, and neither touches any other order. save_all() upserts
    every given order and deletes rows that are no longer in the
    collection, inside one transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load_all(self) -> Result[list[Order], StoreError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(select(OrderRow).order_by(OrderRow.created_at))
                return Ok([row.to_order() for row in rows])
        except (SQLAlchemyError, ValueError, KeyError) as e:
            logger.error("Failed to load orders", error=str(e))
            return Error(StoreError("Failed to load orders", e))

    async def save_all(self, orders: Sequence[Order]) -> Result[None, StoreError]:
        ids = [o.order_id for o in orders]
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(delete(OrderRow).where(OrderRow.order_id.not_in(ids)))
                for order in orders:
                    await session.merge(OrderRow.from_order(order))
        except SQLAlchemyError as e:
            logger.error("Failed to save orders", count=len(ids), error=str(e))
            return Error(StoreError("Failed to save orders", e))
        return Ok(None)

    async def append(self, order: Order) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(OrderRow.from_order(order))
        except IntegrityError:
            return Error(duplicate_order(order.order_id))
        except SQLAlchemyError as e:
            logger.error("Failed to append order", order_id=order.order_id, error=str(e))
            return Error(StoreError("Failed to save order", e))
        return Ok(None)

    async def update(self, order: Order) -> Result[None, StoreError]:
        row = OrderRow.from_order(order)
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    sa_update(OrderRow)
                    .where(OrderRow.order_id == order.order_id)
                    .values(status=row.status, total=row.total, payload=row.payload)
                )
                changed = result.rowcount
        except SQLAlchemyError as e:
            logger.error("Failed to update order", order_id=order.order_id, error=str(e))
            return Error(StoreError("Failed to save order", e))
        return Ok(None) if changed else Error(missing_order(order.order_id))


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create database and return (session_factory, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = (
    "Base",
    "OrderRow",
    "SQLAlchemyOrderStore",
    "create_database",
)
