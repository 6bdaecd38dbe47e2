"""
Pricing — subtotal, conditional discount, final total.

    from cartflow import pricing as P

    subtotal = P.compute_subtotal(cart.items)
    discount = P.compute_discount(subtotal, eligible=True)
    total = P.compute_final_total(subtotal, discount)
"""

from cartflow.pricing._engine import (
    DISCOUNT_RATE,
    Priced,
    compute_subtotal,
    compute_discount,
    compute_final_total,
    Pricing,
    price_cart,
)
from cartflow.pricing._format import format_price

__all__ = (
    "DISCOUNT_RATE",
    "Priced",
    "compute_subtotal",
    "compute_discount",
    "compute_final_total",
    "Pricing",
    "price_cart",
    "format_price",
)
