"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine

from cartflow.domain import CustomerProfile, Order


DEMO_PROFILE = CustomerProfile(
    customer_name="Ada Lovelace",
    shipping_address="12 Analytical Engine St, London",
    discount_eligible=True,
)


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def print_order(order: Order) -> None:
    print(f"  Receipt #{order.receipt_number}  ({order.transaction_id})")
    print(f"  {order.formatted_timestamp}  {order.customer_name}, {order.shipping_address}")
    for item in order.items:
        print(f"    {item.quantity} x {item.name:<22} {item.formatted_subtotal:>10}")
    print(f"  Subtotal {order.subtotal:>12}")
    print(f"  Discount {order.discount_amount:>12}")
    print(f"  Total    {order.final_total:>12}  via {order.payment_method}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
