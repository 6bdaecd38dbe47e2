"""
Events — one-shot notifications (not replayed on resubscription).

    from cartflow import events as Ev

    channel = Ev.EventChannel(capacity=16)
    channel.send(Ev.ShowMessage("Cart emptied"))

    async for event in channel.consume():
        ...
"""

from cartflow.domain import ChannelBusyError
from cartflow.events._types import ShowMessage, CheckoutCompleted, CartEvent
from cartflow.events._channel import EventChannel

__all__ = (
    "ShowMessage",
    "CheckoutCompleted",
    "CartEvent",
    "EventChannel",
    "ChannelBusyError",
)
