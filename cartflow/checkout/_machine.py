"""
Checkout state machine.

    IDLE ──checkout()──▶ PROCESSING ──(order | error)──▶ IDLE

One checkout at a time per machine. Payment and cart clearing run as a
compensated pair: if the cart cannot be cleared, the charge is refunded.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error, LazyCoroResult

from cartflow._types import Lazy
from cartflow.cart import CartStore
from cartflow.checkout import _saga as S
from cartflow.checkout._payment import PaymentDeclined, PaymentProcessor, PaymentReceipt, PaymentRequest
from cartflow.checkout._types import CheckoutError, CheckoutErrorKind, CheckoutResult, CheckoutState
from cartflow.domain import Cart, Order
from cartflow.events import CheckoutCompleted, EventChannel
from cartflow.pricing import DISCOUNT_RATE, Pricing, price_cart

logger = structlog.get_logger(__name__)


def new_transaction_id() -> str:
    """TRX- followed by 8 upper-case hex characters."""
    return f"TRX-{uuid.uuid4().hex[:8].upper()}"


def _payment_failed(exc: Exception) -> CheckoutError:
    return CheckoutError(CheckoutErrorKind.PAYMENT, f"Payment failed: {exc}", exc)


def _payment_declined(declined: PaymentDeclined) -> CheckoutError:
    return CheckoutError(CheckoutErrorKind.PAYMENT, f"Payment declined: {declined.reason}", declined)


class CheckoutMachine:
    """
    Turns the current cart into an Order.

    Steps, in order:
        1. Already PROCESSING: Ok(CheckoutResult.ignored()), nothing else happens.
        2. Validate customer input (still IDLE on failure).
        3. Enter PROCESSING, snapshot the cart; empty cart is an error.
        4. Price it and pick a transaction id.
        5. Charge.
        6. Build the Order.
        7. Clear the cart (refund on failure).
        8. Record the order, back to IDLE, publish CheckoutCompleted.

    Every failure path returns to IDLE. Steps 5-8 run in their own task:
    cancelling the caller after the charge started does not interrupt them.
    Use wait_idle() to wait for a transition the caller walked away from.

    Example:
        machine = CheckoutMachine(cart, channel, SimulatedPaymentProcessor())

        match await machine.checkout("Ada Lovelace", "12 Analytical St", "card", True):
            case Ok(CheckoutResult(order=order, accepted=True)):
                print(order.transaction_id)
            case Ok(_):
                pass  # another checkout is running
            case Error(e):
                print(e.kind, e.message)
    """

    def __init__(
        self,
        cart: CartStore,
        events: EventChannel,
        payments: PaymentProcessor,
        *,
        discount_rate: Decimal = DISCOUNT_RATE,
        min_customer_name_length: int = 4,
        min_shipping_address_length: int = 6,
        transaction_ids: Callable[[], str] = new_transaction_id,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._cart = cart
        self._events = events
        self._payments = payments
        self._discount_rate = discount_rate
        self._min_name = min_customer_name_length
        self._min_address = min_shipping_address_length
        self._transaction_ids = transaction_ids
        self._clock = clock

        self._state = CheckoutState.IDLE
        self._idle = asyncio.Event()
        self._idle.set()
        self._last_order: Order | None = None
        self._inflight: asyncio.Task[Result[CheckoutResult, CheckoutError]] | None = None

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._state is CheckoutState.PROCESSING

    @property
    def last_order(self) -> Order | None:
        """Most recent completed order. Failed attempts never touch it."""
        return self._last_order

    async def wait_idle(self) -> None:
        await self._idle.wait()

    # ───────────────────────────────────────────────────────────────────────────
    # Checkout
    # ───────────────────────────────────────────────────────────────────────────

    async def checkout(
        self,
        customer_name: str,
        shipping_address: str,
        payment_method: str,
        discount_eligible: bool = False,
    ) -> Result[CheckoutResult, CheckoutError]:
        if self.is_processing:
            logger.info("Checkout already in progress, request ignored")
            return Ok(CheckoutResult.ignored())

        match self._validate(customer_name, shipping_address, payment_method):
            case Error(e):
                logger.info("Checkout rejected", reason=e.message)
                return Error(e)

        self._enter()
        try:
            snapshot = await self._cart.snapshot()
        except BaseException:
            self._leave()
            raise

        match snapshot:
            case Error(e):
                self._leave()
                return Error(CheckoutError.store(e))
            case Ok(cart) if cart.is_empty:
                self._leave()
                return Error(CheckoutError.empty_cart())
            case Ok(cart):
                settle = asyncio.ensure_future(
                    self._settle(
                        cart,
                        customer_name.strip(),
                        shipping_address.strip(),
                        payment_method.strip(),
                        discount_eligible,
                    )
                )
                self._inflight = settle
                return await asyncio.shield(settle)

    def _validate(
        self, customer_name: str, shipping_address: str, payment_method: str
    ) -> Result[None, CheckoutError]:
        name = customer_name.strip()
        address = shipping_address.strip()

        if not name:
            return Error(CheckoutError.validation("Customer name is required"))
        if len(name) < self._min_name:
            return Error(CheckoutError.validation(f"Customer name must be at least {self._min_name} characters"))
        if not address:
            return Error(CheckoutError.validation("Shipping address is required"))
        if len(address) < self._min_address:
            return Error(
                CheckoutError.validation(f"Shipping address must be at least {self._min_address} characters")
            )
        if not payment_method.strip():
            return Error(CheckoutError.validation("Payment method is required"))
        return Ok(None)

    async def _settle(
        self,
        cart: Cart,
        customer_name: str,
        shipping_address: str,
        payment_method: str,
        discount_eligible: bool,
    ) -> Result[CheckoutResult, CheckoutError]:
        try:
            pricing = price_cart(cart.items, discount_eligible, self._discount_rate)
            transaction_id = self._transaction_ids()
            request = PaymentRequest(
                transaction_id=transaction_id,
                amount=pricing.final_total,
                payment_method=payment_method,
                customer_name=customer_name,
            )

            def clear_for(receipt: PaymentReceipt) -> S.SagaStep[Order, CheckoutError]:
                order = self._build_order(
                    receipt, cart, pricing, customer_name, shipping_address, discount_eligible
                )
                return S.step("clear_cart", self._clear_cart().map(lambda _removed: order))

            settle = S.step("charge", self._charge(request), compensate=self._payments.refund).then(clear_for)
            outcome = await S.run_chain(settle)

            match outcome:
                case Ok(r):
                    self._last_order = r.value
        finally:
            self._leave()

        match outcome:
            case Ok(r):
                order = r.value
                self._events.send(CheckoutCompleted(order.transaction_id))
                logger.info(
                    "Checkout completed",
                    transaction_id=order.transaction_id,
                    items=order.item_count,
                    final_total=str(order.final_total),
                )
                return Ok(CheckoutResult.completed(order))
            case Error(e):
                logger.warning(
                    "Checkout failed",
                    transaction_id=transaction_id,
                    step=e.step_failed,
                    kind=e.error.kind.name,
                    reason=e.error.message,
                    rollback_complete=e.rollback_complete,
                )
                return Error(replace(e.error, rollback_complete=e.rollback_complete))

    # ───────────────────────────────────────────────────────────────────────────
    # Steps
    # ───────────────────────────────────────────────────────────────────────────

    def _charge(self, request: PaymentRequest) -> Lazy[PaymentReceipt, CheckoutError]:
        return L.catching_async(
            lambda: self._payments.charge(request),
            on_error=_payment_failed,
        ).then(lambda charged: L.from_result(charged.map_err(_payment_declined)))

    def _clear_cart(self) -> Lazy[int, CheckoutError]:
        return LazyCoroResult(lambda: self._cart.clear(announce=False)).map_err(CheckoutError.store)

    def _build_order(
        self,
        receipt: PaymentReceipt,
        cart: Cart,
        pricing: Pricing,
        customer_name: str,
        shipping_address: str,
        discount_eligible: bool,
    ) -> Order:
        return Order(
            transaction_id=receipt.transaction_id,
            items=cart.items,
            subtotal=pricing.subtotal,
            discount_amount=pricing.discount,
            final_total=pricing.final_total,
            timestamp=self._clock(),
            customer_name=customer_name,
            shipping_address=shipping_address,
            payment_method=receipt.payment_method,
            discount_eligible=discount_eligible,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # State
    # ───────────────────────────────────────────────────────────────────────────

    def _enter(self) -> None:
        self._state = CheckoutState.PROCESSING
        self._idle.clear()

    def _leave(self) -> None:
        self._state = CheckoutState.IDLE
        self._inflight = None
        self._idle.set()


__all__ = ("CheckoutMachine", "new_transaction_id")
