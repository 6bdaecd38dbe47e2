"""
Store — the durable line-item table behind the cart.

    from cartflow import store as St

    session_factory, engine = await St.create_database("sqlite+aiosqlite:///cart.db")
    line_items = St.SQLAlchemyLineItemStore(session_factory)

    # Tests / single process
    line_items = St.MemoryLineItemStore()
"""

from cartflow.domain import StoreError
from cartflow.store._types import ChangeFeed, LineItemStore
from cartflow.store._memory import MemoryLineItemStore
from cartflow.store._sqlalchemy import (
    Base,
    LineItemTable,
    SQLAlchemyLineItemStore,
    create_database,
)

__all__ = (
    "StoreError",
    "ChangeFeed",
    "LineItemStore",
    "MemoryLineItemStore",
    "Base",
    "LineItemTable",
    "SQLAlchemyLineItemStore",
    "create_database",
)
