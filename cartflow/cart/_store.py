"""
Cart store — single source of truth for the active cart.

Every mutation goes through the line-item store; every committed write
moves the store's change feed, which is what observe() follows.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import structlog
from kungfu import Result, Ok, Error

from cartflow._types import CENT, Money, ProductId
from cartflow.domain import (
    Cart,
    CartError,
    LineItem,
    Product,
    SnapshotUnavailableError,
)
from cartflow.events import EventChannel, ShowMessage
from cartflow.pricing import compute_subtotal
from cartflow.store import LineItemStore

logger = structlog.get_logger(__name__)


class CartStore:
    """
    The active shopper's cart.

    Mutations are serialized (one writer at a time per cart store) on top
    of the line-item store's atomic upsert. A failed mutation changes
    nothing: no snapshot is republished and no message is sent.

    Example:
        cart = CartStore(MemoryLineItemStore(), EventChannel())

        await cart.add_or_increment(mouse)
        await cart.add_or_increment(mouse)    # one row, quantity 2
        await cart.set_quantity(mouse.product_id, 0)  # removed

        async for snapshot in cart.observe():
            render(snapshot)
    """

    def __init__(self, store: LineItemStore, events: EventChannel) -> None:
        self._store = store
        self._events = events
        self._writer = asyncio.Lock()

    @property
    def events(self) -> EventChannel:
        return self._events

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    async def add_or_increment(
        self, product: Product, quantity_delta: int = 1
    ) -> Result[LineItem, CartError]:
        """Add a product, or raise its quantity if it is already in the cart."""
        if quantity_delta < 1:
            return Error(CartError.validation(f"quantity_delta must be >= 1, got {quantity_delta}"))
        if product.unit_price != product.unit_price.quantize(CENT):
            return Error(CartError.validation(f"unit_price must be whole cents, got {product.unit_price}"))

        async with self._writer:
            result = await self._store.increment(product, quantity_delta)

        match result:
            case Ok(item):
                logger.info(
                    "Added to cart",
                    product_id=product.product_id,
                    delta=quantity_delta,
                    quantity=item.quantity,
                )
                self._events.send(ShowMessage(f"{product.name} added to cart"))
                return Ok(item)
            case Error(e):
                return Error(CartError.store(e))

    async def set_quantity(
        self, product_id: ProductId, new_quantity: int
    ) -> Result[LineItem | None, CartError]:
        """
        Set an absolute quantity.

        Zero or below removes the item. An item that is not in the cart is
        left alone: Ok(None), nothing published. A remove racing with a
        quantity edit is therefore harmless.
        """
        if new_quantity <= 0:
            async with self._writer:
                removed = await self._store.delete(product_id)
            match removed:
                case Ok(existed):
                    if existed:
                        logger.info("Removed from cart", product_id=product_id, reason="quantity")
                    return Ok(None)
                case Error(e):
                    return Error(CartError.store(e))

        async with self._writer:
            result = await self._store.set_quantity(product_id, new_quantity)

        match result:
            case Ok(None):
                logger.debug("Quantity change ignored, item not in cart", product_id=product_id)
                return Ok(None)
            case Ok(item):
                logger.info("Quantity set", product_id=product_id, quantity=new_quantity)
                return Ok(item)
            case Error(e):
                return Error(CartError.store(e))

    async def remove(self, product_id: ProductId) -> Result[bool, CartError]:
        """Delete a line item. Ok(True) if it was there."""
        async with self._writer:
            result = await self._store.delete(product_id)

        match result:
            case Ok(existed):
                logger.info("Removed from cart", product_id=product_id, existed=existed)
                self._events.send(ShowMessage("Item removed from cart"))
                return Ok(existed)
            case Error(e):
                return Error(CartError.store(e))

    async def clear(self, *, announce: bool = True) -> Result[int, CartError]:
        """
        Delete every line item.

        Checkout clears with announce=False: it signals completion with its
        own event instead of a "cart emptied" message.
        """
        async with self._writer:
            result = await self._store.delete_all()

        match result:
            case Ok(count):
                logger.info("Cart cleared", removed=count)
                if announce:
                    self._events.send(ShowMessage("Cart emptied"))
                return Ok(count)
            case Error(e):
                return Error(CartError.store(e))

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    async def snapshot(self) -> Result[Cart, CartError]:
        """Current cart, read once."""
        result = await self._store.list_items()
        match result:
            case Ok(items):
                cart = Cart.of(items)
                logger.debug(
                    "Cart snapshot",
                    items=[f"{i.name} x{i.quantity}" for i in cart.items],
                    total=str(cart.total),
                )
                return Ok(cart)
            case Error(e):
                return Error(CartError.store(e))

    async def observe(self) -> AsyncIterator[Cart]:
        """
        Current cart now, then again after every committed change.

        Restartable: every call starts from the current snapshot, not from
        history. Bursts of writes may arrive as one (latest) snapshot.

        Raises:
            SnapshotUnavailableError: the store could not be read.
        """
        feed = self._store.feed
        while True:
            seen = feed.version
            match await self.snapshot():
                case Ok(cart):
                    yield cart
                case Error(e):
                    raise SnapshotUnavailableError(e)
            await feed.wait_past(seen)

    async def current_total(self) -> AsyncIterator[Money]:
        """compute_subtotal of every snapshot observe() yields."""
        async for cart in self.observe():
            yield compute_subtotal(cart.items)


__all__ = ("CartStore",)
