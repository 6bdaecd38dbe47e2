"""
Memory store — in-process line-item table.
"""

from __future__ import annotations

import asyncio

from kungfu import Result, Ok

from cartflow._types import ProductId
from cartflow.domain import LineItem, Product, StoreError
from cartflow.store._types import ChangeFeed


class MemoryLineItemStore:
    """
    In-memory line-item store.

    Note: Single process only. Rows do not survive a restart; use
    SQLAlchemyLineItemStore for a durable cart.
    """

    def __init__(self, items: list[LineItem] | None = None) -> None:
        self._rows: dict[ProductId, LineItem] = {i.product_id: i for i in items or ()}
        self._lock = asyncio.Lock()
        self._feed = ChangeFeed()

    @property
    def feed(self) -> ChangeFeed:
        return self._feed

    async def list_items(self) -> Result[list[LineItem], StoreError]:
        async with self._lock:
            return Ok(sorted(self._rows.values(), key=lambda i: i.product_id))

    async def get(self, product_id: ProductId) -> Result[LineItem | None, StoreError]:
        async with self._lock:
            return Ok(self._rows.get(product_id))

    async def increment(self, product: Product, delta: int) -> Result[LineItem, StoreError]:
        async with self._lock:
            existing = self._rows.get(product.product_id)
            if existing is None:
                row = LineItem.from_product(product, delta)
            else:
                row = existing.with_quantity(existing.quantity + delta)
            self._rows[product.product_id] = row
        self._feed.publish()
        return Ok(row)

    async def set_quantity(
        self, product_id: ProductId, quantity: int
    ) -> Result[LineItem | None, StoreError]:
        async with self._lock:
            existing = self._rows.get(product_id)
            if existing is None:
                return Ok(None)
            row = existing.with_quantity(quantity)
            self._rows[product_id] = row
        self._feed.publish()
        return Ok(row)

    async def delete(self, product_id: ProductId) -> Result[bool, StoreError]:
        async with self._lock:
            existed = self._rows.pop(product_id, None) is not None
        if existed:
            self._feed.publish()
        return Ok(existed)

    async def delete_all(self) -> Result[int, StoreError]:
        async with self._lock:
            count = len(self._rows)
            self._rows.clear()
        self._feed.publish()
        return Ok(count)


__all__ = ("MemoryLineItemStore",)
