"""
SQLAlchemy integration — durable line-item table.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///cart.db")
    store = SQLAlchemyLineItemStore(session_factory)
    cart = CartStore(store, EventChannel())

Note: Prices are stored as integer cents, never as floats.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, cast

import structlog
from kungfu import Result, Ok, Error
from sqlalchemy import CursorResult, DateTime, Integer, String, Text, delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from cartflow._types import Money, ProductId
from cartflow.domain import LineItem, Product, StoreError
from cartflow.store._types import ChangeFeed

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class LineItemTable(Base):
    """
    One row per product in the cart.

    Note: product_id is the primary key, so a second row for the same
    product is impossible at the schema level too.
    """

    __tablename__ = "cart_line_items"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    # Product snapshot taken when the item was first added
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    image_ref: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    available_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def to_line_item(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            name=self.name,
            description=self.description,
            unit_price=from_cents(self.unit_price_cents),
            image_ref=self.image_ref,
            category=self.category,
            available_stock=self.available_stock,
            quantity=self.quantity,
        )


def to_cents(amount: Money) -> int:
    return int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Money:
    return Decimal(cents) / 100


def _utcnow() -> datetime:
    # SQLite DATETIME columns are naive
    return datetime.now(UTC).replace(tzinfo=None)


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyLineItemStore:
    """
    Line-item store over an async SQLAlchemy session factory.

    Every session, read or write, runs under one lock (one open
    transaction per store at a time) and increment() is an INSERT ... ON
    CONFLICT DO UPDATE, so concurrent adds of the same product always land
    in one row.

    Note: reads take the lock too. An in-memory database hands every
    session the same connection, and a session closing there rolls back
    whatever transaction is open on it.

    Example:
        session_factory, engine = await create_database()
        store = SQLAlchemyLineItemStore(session_factory)

        result = await store.increment(mouse, 2)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._lock = asyncio.Lock()
        self._feed = ChangeFeed()

    @property
    def feed(self) -> ChangeFeed:
        return self._feed

    async def list_items(self) -> Result[list[LineItem], StoreError]:
        try:
            async with self._lock, self._session_factory() as session:
                rows = (
                    await session.execute(
                        select(LineItemTable).order_by(LineItemTable.product_id)
                    )
                ).scalars().all()
                return Ok([row.to_line_item() for row in rows])

        except Exception as e:
            return self._failed("list items", e)

    async def get(self, product_id: ProductId) -> Result[LineItem | None, StoreError]:
        try:
            async with self._lock, self._session_factory() as session:
                row = await session.get(LineItemTable, product_id)
                return Ok(row.to_line_item() if row is not None else None)

        except Exception as e:
            return self._failed("get item", e, product_id=product_id)

    async def increment(self, product: Product, delta: int) -> Result[LineItem, StoreError]:
        """Upsert: insert with quantity=delta, or add delta to the stored row."""
        try:
            async with self._lock, self._session_factory() as session:
                insert_stmt = sqlite_insert(LineItemTable).values(
                    product_id=product.product_id,
                    name=product.name,
                    description=product.description,
                    unit_price_cents=to_cents(product.unit_price),
                    image_ref=product.image_ref,
                    category=product.category,
                    available_stock=product.available_stock,
                    quantity=delta,
                    updated_at=_utcnow(),
                )
                stmt = insert_stmt.on_conflict_do_update(
                    index_elements=[LineItemTable.product_id],
                    set_={
                        "quantity": LineItemTable.quantity + insert_stmt.excluded.quantity,
                        "updated_at": insert_stmt.excluded.updated_at,
                    },
                )
                await session.execute(stmt)
                row = (
                    await session.execute(
                        select(LineItemTable).where(
                            LineItemTable.product_id == product.product_id
                        )
                    )
                ).scalar_one()
                item = row.to_line_item()
                await session.commit()

        except Exception as e:
            return self._failed("increment item", e, product_id=product.product_id)

        self._feed.publish()
        return Ok(item)

    async def set_quantity(
        self, product_id: ProductId, quantity: int
    ) -> Result[LineItem | None, StoreError]:
        try:
            async with self._lock, self._session_factory() as session:
                cursor = cast(
                    CursorResult[Any],
                    await session.execute(
                        update(LineItemTable)
                        .where(LineItemTable.product_id == product_id)
                        .values(quantity=quantity, updated_at=_utcnow())
                    ),
                )
                if cursor.rowcount == 0:
                    return Ok(None)

                row = await session.get(LineItemTable, product_id)
                item = row.to_line_item() if row is not None else None
                await session.commit()

        except Exception as e:
            return self._failed("set quantity", e, product_id=product_id)

        self._feed.publish()
        return Ok(item)

    async def delete(self, product_id: ProductId) -> Result[bool, StoreError]:
        try:
            async with self._lock, self._session_factory() as session:
                cursor = cast(
                    CursorResult[Any],
                    await session.execute(
                        delete(LineItemTable).where(LineItemTable.product_id == product_id)
                    ),
                )
                await session.commit()
                existed = cursor.rowcount > 0

        except Exception as e:
            return self._failed("delete item", e, product_id=product_id)

        if existed:
            self._feed.publish()
        return Ok(existed)

    async def delete_all(self) -> Result[int, StoreError]:
        try:
            async with self._lock, self._session_factory() as session:
                cursor = cast(CursorResult[Any], await session.execute(delete(LineItemTable)))
                await session.commit()
                count = cursor.rowcount

        except Exception as e:
            return self._failed("delete all items", e)

        self._feed.publish()
        return Ok(count)

    def _failed(self, action: str, exc: Exception, **context: Any) -> Error[StoreError]:
        logger.error("Line item store failure", action=action, error=str(exc), **context)
        return Error(StoreError(f"Failed to {action}: {exc}", exc))


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create schema and return (session_factory, engine)."""
    if ":memory:" in url:
        # One shared connection, or every session sees its own empty database
        engine = create_async_engine(url, echo=False, poolclass=StaticPool)
    else:
        engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = (
    "Base",
    "LineItemTable",
    "SQLAlchemyLineItemStore",
    "create_database",
    "to_cents",
    "from_cents",
)
