"""
Catalog and profile collaborators.

The cart never owns product data: it asks a Catalog for a Product and
copies the fields it needs into the line item.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Protocol

from kungfu import Result, Ok, Error

from cartflow._types import ProductId
from cartflow.domain import CatalogError, CustomerProfile, Product

# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class Catalog(Protocol):
    async def get_product(self, product_id: ProductId) -> Result[Product, CatalogError]: ...


class InMemoryCatalog:
    """Fixed product list, looked up by id."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products = {p.product_id: p for p in products}

    @property
    def products(self) -> list[Product]:
        return sorted(self._products.values(), key=lambda p: p.product_id)

    async def get_product(self, product_id: ProductId) -> Result[Product, CatalogError]:
        product = self._products.get(product_id)
        if product is None:
            return Error(CatalogError(product_id, f"Product {product_id} not found"))
        return Ok(product)


DEMO_PRODUCTS: tuple[Product, ...] = (
    Product(
        product_id=1,
        name="Gaming Mouse",
        description="RGB mouse, 16000 DPI",
        unit_price=Decimal("25000"),
        image_ref="gaming_mouse",
        category="Peripherals",
        available_stock=15,
    ),
    Product(
        product_id=2,
        name="Mechanical Keyboard",
        description="Mechanical keyboard with blue switches",
        unit_price=Decimal("45000"),
        image_ref="mechanical_keyboard",
        category="Peripherals",
        available_stock=10,
    ),
    Product(
        product_id=3,
        name="Gaming Headset",
        description="Headset with 7.1 surround sound",
        unit_price=Decimal("35000"),
        image_ref="gaming_headset",
        category="Audio",
        available_stock=8,
    ),
)

# ═══════════════════════════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════════════════════════


class ProfileProvider(Protocol):
    async def current_profile(self) -> CustomerProfile: ...


class StaticProfileProvider:
    def __init__(self, profile: CustomerProfile) -> None:
        self._profile = profile

    async def current_profile(self) -> CustomerProfile:
        return self._profile


__all__ = (
    "Catalog",
    "InMemoryCatalog",
    "DEMO_PRODUCTS",
    "ProfileProvider",
    "StaticProfileProvider",
)
