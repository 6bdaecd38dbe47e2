"""Shared fixtures: products, stores, channel, cart, payment processors."""

import asyncio
from decimal import Decimal

import pytest
from kungfu import Result, Ok, Error

from cartflow.cart import CartStore
from cartflow.checkout import (
    CheckoutMachine,
    PaymentDeclined,
    PaymentReceipt,
    PaymentRequest,
    SimulatedPaymentProcessor,
)
from cartflow.domain import LineItem, Product, StoreError
from cartflow.events import EventChannel
from cartflow.store import MemoryLineItemStore


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------
class FlakyLineItemStore(MemoryLineItemStore):
    """Memory store whose named operations fail while listed in `failing`."""

    def __init__(self) -> None:
        super().__init__()
        self.failing: set[str] = set()

    def _error(self, op: str) -> Error[StoreError]:
        return Error(StoreError(f"Failed to {op}: disk I/O error"))

    async def list_items(self) -> Result[list[LineItem], StoreError]:
        if "list_items" in self.failing:
            return self._error("list items")
        return await super().list_items()

    async def increment(self, product, delta):
        if "increment" in self.failing:
            return self._error("increment item")
        return await super().increment(product, delta)

    async def set_quantity(self, product_id, quantity):
        if "set_quantity" in self.failing:
            return self._error("set quantity")
        return await super().set_quantity(product_id, quantity)

    async def delete(self, product_id):
        if "delete" in self.failing:
            return self._error("delete item")
        return await super().delete(product_id)

    async def delete_all(self):
        if "delete_all" in self.failing:
            return self._error("delete all items")
        return await super().delete_all()


class DecliningPaymentProcessor:
    def __init__(self, reason: str = "insufficient funds") -> None:
        self.reason = reason
        self.refunds: list[PaymentReceipt] = []

    async def charge(self, request: PaymentRequest) -> Result[PaymentReceipt, PaymentDeclined]:
        return Error(PaymentDeclined(self.reason))

    async def refund(self, receipt: PaymentReceipt) -> None:
        self.refunds.append(receipt)


class GatedPaymentProcessor(SimulatedPaymentProcessor):
    """Approves once `release()` is called; `started` is set when charge begins."""

    def __init__(self) -> None:
        super().__init__(delay=0)
        self.started = asyncio.Event()
        self._gate = asyncio.Event()

    def release(self) -> None:
        self._gate.set()

    async def charge(self, request: PaymentRequest) -> Result[PaymentReceipt, PaymentDeclined]:
        self.started.set()
        await self._gate.wait()
        return await super().charge(request)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@pytest.fixture()
def mouse():
    return Product(
        product_id=1,
        name="Gaming Mouse",
        description="RGB mouse, 16000 DPI",
        unit_price=Decimal("25000"),
        category="Peripherals",
        available_stock=15,
    )


@pytest.fixture()
def keyboard():
    return Product(
        product_id=2,
        name="Mechanical Keyboard",
        description="Blue switches",
        unit_price=Decimal("45000"),
        category="Peripherals",
        available_stock=10,
    )


@pytest.fixture()
def headset():
    return Product(
        product_id=3,
        name="Gaming Headset",
        description="7.1 surround",
        unit_price=Decimal("35000"),
        category="Audio",
        available_stock=0,
    )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@pytest.fixture()
def line_items():
    return MemoryLineItemStore()


@pytest.fixture()
def flaky_line_items():
    return FlakyLineItemStore()


@pytest.fixture()
def channel():
    return EventChannel(capacity=16)


@pytest.fixture()
def cart(line_items, channel):
    return CartStore(line_items, channel)


# ---------------------------------------------------------------------------
# Payments & checkout
# ---------------------------------------------------------------------------
@pytest.fixture()
def payments():
    return SimulatedPaymentProcessor(delay=0)


@pytest.fixture()
def declining_payments():
    return DecliningPaymentProcessor()


@pytest.fixture()
def gated_payments():
    return GatedPaymentProcessor()


@pytest.fixture()
def make_machine():
    """Build a CheckoutMachine with deterministic ids; override anything by keyword."""

    def _make(cart, payments, **overrides):
        ids = iter(f"TRX-{n:08X}" for n in range(1, 1000))
        options = {"transaction_ids": lambda: next(ids)}
        options.update(overrides)
        return CheckoutMachine(cart, cart.events, payments, **options)

    return _make
