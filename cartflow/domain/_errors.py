"""
Error values.

Errors travel inside `Result` — they are data, not raised exceptions.
The exceptions at the bottom are for the two places where a Result cannot
be returned: an async iterator and a programming error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Error
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    """Kinds of cart errors."""

    STORE = auto()  # Persistence failed; nothing was written
    VALIDATION = auto()  # Rejected before touching storage
    NOT_FOUND = auto()  # Catalog has no such product


@dataclass(frozen=True)
class CartError:
    """Cart operation error."""

    kind: CartErrorKind
    message: str
    cause: StoreError | None = None

    @classmethod
    def store(cls, error: StoreError) -> CartError:
        return cls(CartErrorKind.STORE, error.message, error)

    @classmethod
    def validation(cls, message: str) -> CartError:
        return cls(CartErrorKind.VALIDATION, message)

    @classmethod
    def not_found(cls, message: str) -> CartError:
        return cls(CartErrorKind.NOT_FOUND, message)


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CatalogError:
    """Product lookup failed."""

    product_id: int
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Exceptions
# ═══════════════════════════════════════════════════════════════════════════════


class SnapshotUnavailableError(Exception):
    """Raised from an observed cart stream when the store cannot be read."""

    def __init__(self, error: CartError) -> None:
        super().__init__(error.message)
        self.error = error


class ChannelBusyError(Exception):
    """Raised when a second consumer attaches to an event channel."""


__all__ = (
    "StoreError",
    "CartErrorKind",
    "CartError",
    "CatalogError",
    "SnapshotUnavailableError",
    "ChannelBusyError",
)
