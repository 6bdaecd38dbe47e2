"""
Checkout — two mice, one keyboard, discount-eligible shopper.

Cart:      cartflow.cart over SQLite (sqlalchemy + aiosqlite)
Checkout:  cartflow.checkout, payment then cart clear with refund on failure
Settings:  CARTFLOW_* environment variables
"""

import asyncio
import contextlib

from kungfu import Ok, Error

from cartflow import configure_logging
from cartflow import events as Ev
from cartflow import session as Ss
from cartflow.config import settings
from examples._infra import DEMO_PROFILE, banner, print_order, run


async def print_events(channel: Ev.EventChannel) -> None:
    async for event in channel.consume():
        match event:
            case Ev.ShowMessage(text):
                print(f"  » {text}")
            case Ev.CheckoutCompleted(transaction_id):
                print(f"  » Checkout completed: {transaction_id}")


async def main() -> None:
    configure_logging(settings.log_level, json=settings.log_json)
    profiles = Ss.StaticProfileProvider(DEMO_PROFILE)

    async with await Ss.open_session(profiles=profiles) as shop:
        listener = asyncio.create_task(print_events(shop.events))

        banner("Cart")
        await shop.cart.clear(announce=False)
        await shop.add_product(1)
        await shop.add_product(1)
        await shop.add_product(2)

        match await shop.cart.snapshot():
            case Ok(cart):
                for item in cart.items:
                    print(f"  {item.quantity} x {item.name} = {item.formatted_subtotal}")
                print(f"  {cart.item_count} items")

        banner("Checkout")
        match await shop.checkout_with_profile("Credit card"):
            case Ok(result) if result.order is not None:
                print_order(result.order)
            case Ok(_):
                print("  Another checkout is already running")
            case Error(e):
                print(f"  ✗ {e.kind.name}: {e.message}")

        await asyncio.sleep(0)
        listener.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await listener


if __name__ == "__main__":
    run(main)
