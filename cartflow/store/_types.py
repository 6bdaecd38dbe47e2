"""
Line-item store — typed storage protocol + change feed.

LineItemStore — durable rows keyed by product_id.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from kungfu import Result

from cartflow._types import ProductId
from cartflow.domain import LineItem, Product, StoreError

# ═══════════════════════════════════════════════════════════════════════════════
# Change Feed
# ═══════════════════════════════════════════════════════════════════════════════


class ChangeFeed:
    """
    Version counter that observers can wait on.

    Every committed write calls publish(). Observers remember the version
    they last rendered and call wait_past() to sleep until it moves.

    Note: Conflating. Three writes between two reads wake the observer
    once; it then reads the latest state.
    """

    def __init__(self) -> None:
        self._version = 0
        self._changed = asyncio.Event()

    @property
    def version(self) -> int:
        return self._version

    def publish(self) -> int:
        """Bump the version and wake every waiter."""
        self._version += 1
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()
        return self._version

    async def wait_past(self, version: int) -> int:
        """Suspend until the feed is past `version`. Returns the new version."""
        while self._version <= version:
            await self._changed.wait()
        return self._version


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class LineItemStore(Protocol):
    """
    Durable line-item table protocol.

    Note: increment() is the only insert path and must be atomic
    (read-check-write under a lock, or an upsert). That is what keeps
    the table at one row per product.

    Example (custom backend):

        class RedisLineItemStore:
            def __init__(self, client: Redis) -> None:
                self.client = client
                self.feed = ChangeFeed()

            async def increment(self, product, delta):
                try:
                    qty = await self.client.hincrby("cart", product.product_id, delta)
                    ...
                    self.feed.publish()
                    return Ok(LineItem.from_product(product, qty))
                except Exception as e:
                    return Error(StoreError("Failed to increment", e))

            # ... other methods
    """

    @property
    def feed(self) -> ChangeFeed:
        """Notifications for committed writes."""
        ...

    async def list_items(self) -> Result[list[LineItem], StoreError]:
        """All rows, ordered by product_id."""
        ...

    async def get(self, product_id: ProductId) -> Result[LineItem | None, StoreError]:
        """Row for a product. Returns Ok(None) if absent."""
        ...

    async def increment(self, product: Product, delta: int) -> Result[LineItem, StoreError]:
        """
        Atomically insert `delta` units or add them to the existing row.

        Returns the row as stored after the write.
        """
        ...

    async def set_quantity(
        self, product_id: ProductId, quantity: int
    ) -> Result[LineItem | None, StoreError]:
        """Overwrite an existing row's quantity. Ok(None) if absent."""
        ...

    async def delete(self, product_id: ProductId) -> Result[bool, StoreError]:
        """Delete a row. Returns Ok(True) if it existed."""
        ...

    async def delete_all(self) -> Result[int, StoreError]:
        """Delete every row. Returns the number removed."""
        ...


__all__ = (
    "ChangeFeed",
    "LineItemStore",
)
