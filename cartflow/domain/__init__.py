"""
Domain — models and error values shared by every component.

    from cartflow.domain import Product, LineItem, Cart, Order
"""

from cartflow.domain._models import (
    Product,
    LineItem,
    Cart,
    CustomerProfile,
    Order,
)
from cartflow.domain._errors import (
    StoreError,
    CartErrorKind,
    CartError,
    CatalogError,
    SnapshotUnavailableError,
    ChannelBusyError,
)

__all__ = (
    "Product",
    "LineItem",
    "Cart",
    "CustomerProfile",
    "Order",
    "StoreError",
    "CartErrorKind",
    "CartError",
    "CatalogError",
    "SnapshotUnavailableError",
    "ChannelBusyError",
)
