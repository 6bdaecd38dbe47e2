"""
cartflow — shopping cart and checkout core.

    from cartflow import cart as Ct       # Observable cart over a line-item store
    from cartflow import checkout as Co   # IDLE → PROCESSING → IDLE, compensated payment
    from cartflow import pricing as P     # Subtotal, discount, final total
    from cartflow import session as Ss    # Per-shopper wiring
"""

from cartflow import pricing
from cartflow import domain
from cartflow import store
from cartflow import events
from cartflow import cart
from cartflow import checkout
from cartflow import session
from cartflow._logging import configure_logging
from cartflow._types import Lazy, Money, ProductId

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "domain",
    "store",
    "events",
    "cart",
    "checkout",
    "session",
    "configure_logging",
    "Lazy",
    "Money",
    "ProductId",
)
