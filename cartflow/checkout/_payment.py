"""
Payment collaborator.

The checkout charges through a PaymentProcessor and, if the cart cannot be
cleared afterwards, refunds the same receipt.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol

import structlog
from kungfu import Result, Ok

from cartflow._types import Money

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PaymentRequest:
    transaction_id: str
    amount: Money
    payment_method: str
    customer_name: str


@dataclass(frozen=True, slots=True)
class PaymentReceipt:
    transaction_id: str
    amount: Money
    payment_method: str


@dataclass(frozen=True)
class PaymentDeclined:
    """Charge refused by the gateway."""

    reason: str


class PaymentProcessor(Protocol):
    """
    Gateway protocol.

    charge() returns the decline as a value. An exception raised from it
    is treated as a gateway failure and also ends up as a PAYMENT error.
    """

    async def charge(self, request: PaymentRequest) -> Result[PaymentReceipt, PaymentDeclined]: ...

    async def refund(self, receipt: PaymentReceipt) -> None: ...


class SimulatedPaymentProcessor:
    """
    Always approves, after `delay` seconds.

    Stands in for a real gateway. Keeps what it charged and refunded so the
    outcome can be inspected.
    """

    def __init__(self, delay: float = 2.0) -> None:
        self._delay = delay
        self.charges: list[PaymentReceipt] = []
        self.refunds: list[PaymentReceipt] = []

    @property
    def call_count(self) -> int:
        return len(self.charges)

    async def charge(self, request: PaymentRequest) -> Result[PaymentReceipt, PaymentDeclined]:
        logger.info(
            "Processing payment",
            transaction_id=request.transaction_id,
            amount=str(request.amount),
            method=request.payment_method,
        )
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        receipt = PaymentReceipt(
            transaction_id=request.transaction_id,
            amount=request.amount,
            payment_method=request.payment_method,
        )
        self.charges.append(receipt)
        return Ok(receipt)

    async def refund(self, receipt: PaymentReceipt) -> None:
        self.refunds.append(receipt)
        logger.warning("Payment refunded", transaction_id=receipt.transaction_id, amount=str(receipt.amount))


__all__ = (
    "PaymentRequest",
    "PaymentReceipt",
    "PaymentDeclined",
    "PaymentProcessor",
    "SimulatedPaymentProcessor",
)
