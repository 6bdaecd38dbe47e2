"""
Event channel — single consumer, bounded, never replayed.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterator

import structlog

from cartflow.domain import ChannelBusyError
from cartflow.events._types import CartEvent

logger = structlog.get_logger(__name__)


class EventChannel:
    """
    Pipe for transient signals: messages and "checkout completed".

    Guarantees:
        - At most one consumer attached at a time.
        - An event is delivered at most once. Once taken it is gone, so a
          consumer attaching later never sees it again.
        - send() never suspends. Up to `capacity` events wait for a
          consumer; past that the oldest is dropped.

    Note: Not a state stream. Use CartStore.observe() for "what is in
    the cart right now".

    Example:
        channel = EventChannel(capacity=16)

        async for event in channel.consume():
            match event:
                case ShowMessage(text):
                    toast(text)
                case CheckoutCompleted(transaction_id):
                    show_receipt(transaction_id)
    """

    def __init__(self, capacity: int = 16) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._buffer: deque[CartEvent] = deque()
        self._ready = asyncio.Event()
        self._attached = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def pending(self) -> int:
        """Events buffered and not yet taken."""
        return len(self._buffer)

    @property
    def has_consumer(self) -> bool:
        return self._attached

    def send(self, event: CartEvent) -> bool:
        """
        Enqueue an event.

        Returns False if the buffer was full and the oldest event had to
        be dropped to make room.
        """
        delivered_all = True
        if len(self._buffer) >= self._capacity:
            dropped = self._buffer.popleft()
            delivered_all = False
            logger.warning(
                "Event buffer full, dropping oldest event",
                dropped=repr(dropped),
                capacity=self._capacity,
            )
        self._buffer.append(event)
        self._ready.set()
        return delivered_all

    def drain(self) -> list[CartEvent]:
        """Take every buffered event without waiting."""
        events = list(self._buffer)
        self._buffer.clear()
        self._ready.clear()
        return events

    async def consume(self) -> AsyncIterator[CartEvent]:
        """
        Attach as the consumer and yield events as they arrive.

        Infinite. Detaches when the iterator is closed. Raises
        ChannelBusyError on first iteration if another consumer is
        attached.
        """
        if self._attached:
            raise ChannelBusyError("event channel already has a consumer")
        self._attached = True
        try:
            while True:
                yield await self._receive()
        finally:
            self._attached = False

    async def _receive(self) -> CartEvent:
        while not self._buffer:
            self._ready.clear()
            await self._ready.wait()
        return self._buffer.popleft()


__all__ = ("EventChannel",)
