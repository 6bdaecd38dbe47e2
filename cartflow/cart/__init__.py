"""
Cart — the active shopper's cart, backed by a durable line-item store.

    from cartflow import cart as Ct

    cart = Ct.CartStore(line_items, channel)
    await cart.add_or_increment(product)

    async for snapshot in cart.observe():
        ...
"""

from cartflow.domain import Cart, CartError, CartErrorKind, SnapshotUnavailableError
from cartflow.cart._store import CartStore

__all__ = (
    "Cart",
    "CartError",
    "CartErrorKind",
    "SnapshotUnavailableError",
    "CartStore",
)
