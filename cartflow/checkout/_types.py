"""
Checkout types: machine state, outcomes, errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from cartflow.domain import CartError, Order

# ═══════════════════════════════════════════════════════════════════════════════
# State
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutState(Enum):
    """
    Checkout lifecycle.

    Note: there is no failed terminal state. Every attempt, successful or
    not, ends back in IDLE.
    """

    IDLE = auto()
    PROCESSING = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    VALIDATION = auto()  # Bad customer input, nothing touched
    EMPTY_CART = auto()  # Nothing to buy
    STORE = auto()  # Cart could not be read or cleared
    PAYMENT = auto()  # Charge declined or gateway failed


@dataclass(frozen=True)
class CheckoutError:
    """
    Checkout failure.

    rollback_complete is False only when a charge was made and the refund
    itself failed; the payment then needs manual attention.
    """

    kind: CheckoutErrorKind
    message: str
    original_error: object = None
    rollback_complete: bool = True

    @classmethod
    def validation(cls, message: str) -> CheckoutError:
        return cls(CheckoutErrorKind.VALIDATION, message)

    @classmethod
    def empty_cart(cls) -> CheckoutError:
        return cls(CheckoutErrorKind.EMPTY_CART, "Cart is empty")

    @classmethod
    def store(cls, error: CartError) -> CheckoutError:
        return cls(CheckoutErrorKind.STORE, error.message, error)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    """
    What a checkout call did.

    accepted=False means another checkout was already running and this call
    had no effect; order is None in that case.
    """

    order: Order | None
    accepted: bool

    @classmethod
    def completed(cls, order: Order) -> CheckoutResult:
        return cls(order=order, accepted=True)

    @classmethod
    def ignored(cls) -> CheckoutResult:
        return cls(order=None, accepted=False)


__all__ = (
    "CheckoutState",
    "CheckoutErrorKind",
    "CheckoutError",
    "CheckoutResult",
)
