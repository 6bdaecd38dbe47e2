"""
Pricing engine — subtotal, discount, final total.

Pure functions over line items. No I/O, no shared state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

from cartflow._types import Money, ZERO, CENT

# ═══════════════════════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════════════════════

DISCOUNT_RATE: Money = Decimal("0.10")
"""Flat discount granted to eligible (loyalty member) customers."""


class Priced(Protocol):
    """Anything that knows its own subtotal (LineItem does)."""

    @property
    def subtotal(self) -> Money: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Core Functions
# ═══════════════════════════════════════════════════════════════════════════════


def compute_subtotal(items: Iterable[Priced]) -> Money:
    """Sum of all line subtotals. Zero for an empty cart."""
    return sum((item.subtotal for item in items), start=ZERO)


def compute_discount(
    subtotal: Money,
    eligible: bool,
    rate: Money = DISCOUNT_RATE,
) -> Money:
    """
    Discount for a subtotal.

    `subtotal * rate` rounded to cents when eligible, otherwise zero.
    Never negative.
    """
    if not eligible or subtotal <= ZERO or rate <= ZERO:
        return ZERO
    return (subtotal * rate).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_final_total(subtotal: Money, discount: Money) -> Money:
    """`subtotal - discount`, clamped at zero."""
    return max(subtotal - discount, ZERO)


# ═══════════════════════════════════════════════════════════════════════════════
# Pricing
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Pricing:
    """Priced cart: what checkout writes into the order."""

    subtotal: Money
    discount: Money
    final_total: Money


def price_cart(
    items: Iterable[Priced],
    eligible: bool,
    rate: Money = DISCOUNT_RATE,
) -> Pricing:
    """
    Price a cart in one go.

    Example:
        pricing = P.price_cart(cart.items, eligible=profile.discount_eligible)
        pricing.final_total  # Decimal("85500.00")
    """
    subtotal = compute_subtotal(items)
    discount = compute_discount(subtotal, eligible, rate)
    return Pricing(
        subtotal=subtotal,
        discount=discount,
        final_total=compute_final_total(subtotal, discount),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "DISCOUNT_RATE",
    "Priced",
    "compute_subtotal",
    "compute_discount",
    "compute_final_total",
    "Pricing",
    "price_cart",
)
