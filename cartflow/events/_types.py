"""
Event types — one-shot notifications.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ShowMessage:
    """User-facing confirmation ("Gaming Mouse added to cart")."""

    text: str


@dataclass(frozen=True, slots=True)
class CheckoutCompleted:
    """Checkout finished; the order is available as the machine's last_order."""

    transaction_id: str


type CartEvent = ShowMessage | CheckoutCompleted


__all__ = ("ShowMessage", "CheckoutCompleted", "CartEvent")
