"""
Domain models — Product, LineItem, Cart, Order, CustomerProfile.

All models are immutable. A "mutation" of a line item is a new LineItem
written through the cart store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from cartflow._types import CENT, Money, ProductId, ZERO
from cartflow.pricing import compute_subtotal, format_price

# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """
    Catalog record, as supplied by the catalog collaborator.

    Note: unit_price must be a whole number of cents; a cart rejects
    anything finer.
    """

    product_id: ProductId
    name: str
    description: str
    unit_price: Money
    image_ref: str = ""
    category: str = ""
    available_stock: int = 0

    @property
    def has_stock(self) -> bool:
        return self.available_stock > 0

    @property
    def formatted_price(self) -> str:
        return format_price(self.unit_price)


# ═══════════════════════════════════════════════════════════════════════════════
# Line Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    """
    One product quantity in the cart.

    Note: quantity is always >= 1. Driving it to zero is a removal,
    which the cart store performs instead of building a LineItem.
    """

    product_id: ProductId
    name: str
    description: str
    unit_price: Money
    image_ref: str
    category: str
    available_stock: int
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")
        if self.unit_price < ZERO:
            raise ValueError(f"unit_price must be >= 0, got {self.unit_price}")
        if self.unit_price != self.unit_price.quantize(CENT):
            raise ValueError(f"unit_price must be whole cents, got {self.unit_price}")

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> LineItem:
        return cls(
            product_id=product.product_id,
            name=product.name,
            description=product.description,
            unit_price=product.unit_price,
            image_ref=product.image_ref,
            category=product.category,
            available_stock=product.available_stock,
            quantity=quantity,
        )

    @property
    def product(self) -> Product:
        return Product(
            product_id=self.product_id,
            name=self.name,
            description=self.description,
            unit_price=self.unit_price,
            image_ref=self.image_ref,
            category=self.category,
            available_stock=self.available_stock,
        )

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def formatted_subtotal(self) -> str:
        return format_price(self.subtotal)

    def with_quantity(self, quantity: int) -> LineItem:
        return replace(self, quantity=quantity)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Cart:
    """
    Snapshot of every line item of the active cart.

    Note: at most one LineItem per product_id; the store keys rows by it.
    """

    items: tuple[LineItem, ...] = ()

    @classmethod
    def of(cls, items: list[LineItem] | tuple[LineItem, ...]) -> Cart:
        return cls(items=tuple(sorted(items, key=lambda i: i.product_id)))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Money:
        return compute_subtotal(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: ProductId) -> LineItem | None:
        return next((i for i in self.items if i.product_id == product_id), None)


# ═══════════════════════════════════════════════════════════════════════════════
# Customer
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CustomerProfile:
    """What the user profile collaborator knows about the shopper."""

    customer_name: str
    shipping_address: str
    discount_eligible: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    """
    Priced, receipted snapshot of a cart, created once per checkout.

    Invariants:
        final_total == subtotal - discount_amount
        discount_amount == 0 unless discount_eligible
    """

    transaction_id: str
    items: tuple[LineItem, ...]
    subtotal: Money
    discount_amount: Money
    final_total: Money
    timestamp: datetime
    customer_name: str
    shipping_address: str
    payment_method: str
    discount_eligible: bool

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def receipt_number(self) -> str:
        return self.transaction_id[-6:]

    @property
    def formatted_timestamp(self) -> str:
        return self.timestamp.strftime("%d/%m/%Y %H:%M")


__all__ = (
    "Product",
    "LineItem",
    "Cart",
    "CustomerProfile",
    "Order",
)
