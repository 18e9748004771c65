"""
Storage — where confirmed orders live.

    from shopsaga.storage import MemoryOrderStore, JsonFileOrderStore

    store = JsonFileOrderStore("data/orders.json")
    await store.append(order)          # one locked read-and-write
    match await store.load_all():
        case Ok(orders): ...
        case Error(e): ...
"""

from shopsaga.storage._store import StoreError, OrderStore, MemoryOrderStore
from shopsaga.storage._json import JsonFileOrderStore
from shopsaga.storage._sqlalchemy import (
    Base,
    OrderRow,
    SQLAlchemyOrderStore,
    create_database,
)

__all__ = (
    "StoreError",
    "OrderStore",
    "MemoryOrderStore",
    "JsonFileOrderStore",
    "Base",
    "OrderRow",
    "SQLAlchemyOrderStore",
    "create_database",
)
