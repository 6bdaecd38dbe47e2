"""
Price formatting for receipts and messages.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_DOWN

from cartflow._types import Money


def format_price(amount: Money) -> str:
    """
    Whole units with `.` as the thousands separator.

    Example:
        format_price(Decimal("25000"))    # "$25.000"
        format_price(Decimal("1234567"))  # "$1.234.567"
    """
    units = int(amount.quantize(Decimal("1"), rounding=ROUND_DOWN))
    sign = "-" if units < 0 else ""
    return f"{sign}${abs(units):,}".replace(",", ".")


__all__ = ("format_price",)
