"""
Checkout — cart to order, one at a time.

    from cartflow import checkout as Co

    machine = Co.CheckoutMachine(cart, channel, Co.SimulatedPaymentProcessor(delay=2.0))

    match await machine.checkout(name, address, "card", discount_eligible=True):
        case Ok(Co.CheckoutResult(order=order, accepted=True)):
            ...
"""

from cartflow.checkout._types import (
    CheckoutState,
    CheckoutErrorKind,
    CheckoutError,
    CheckoutResult,
)
from cartflow.checkout._payment import (
    PaymentRequest,
    PaymentReceipt,
    PaymentDeclined,
    PaymentProcessor,
    SimulatedPaymentProcessor,
)
from cartflow.checkout._saga import (
    SagaStep,
    SagaResult,
    SagaError,
    step,
    run_chain,
)
from cartflow.checkout._machine import CheckoutMachine, new_transaction_id

__all__ = (
    # State & outcome
    "CheckoutState",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutResult",
    # Payment
    "PaymentRequest",
    "PaymentReceipt",
    "PaymentDeclined",
    "PaymentProcessor",
    "SimulatedPaymentProcessor",
    # Compensated steps
    "SagaStep",
    "SagaResult",
    "SagaError",
    "step",
    "run_chain",
    # Machine
    "CheckoutMachine",
    "new_transaction_id",
)
