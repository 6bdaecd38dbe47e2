"""Event channel: bounded buffer, single consumer, no replay."""

import asyncio

import pytest

from cartflow.events import ChannelBusyError, CheckoutCompleted, EventChannel, ShowMessage


class TestSend:
    def test_buffers_until_consumed(self):
        channel = EventChannel(capacity=4)

        assert channel.send(ShowMessage("a")) is True
        assert channel.send(CheckoutCompleted("TRX-00000001")) is True
        assert channel.pending == 2

    def test_full_buffer_drops_oldest(self):
        channel = EventChannel(capacity=2)
        channel.send(ShowMessage("a"))
        channel.send(ShowMessage("b"))

        assert channel.send(ShowMessage("c")) is False
        assert channel.drain() == [ShowMessage("b"), ShowMessage("c")]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            EventChannel(capacity=0)


class TestDrain:
    def test_events_are_gone_once_taken(self):
        channel = EventChannel()
        channel.send(ShowMessage("Cart emptied"))

        assert channel.drain() == [ShowMessage("Cart emptied")]
        assert channel.drain() == []
        assert channel.pending == 0


class TestConsume:
    def test_delivers_buffered_then_live_events(self):
        async def scenario():
            channel = EventChannel()
            channel.send(ShowMessage("early"))
            received = []

            async def consumer():
                async for event in channel.consume():
                    received.append(event)
                    if len(received) == 2:
                        break

            task = asyncio.create_task(consumer())
            await asyncio.sleep(0)
            channel.send(ShowMessage("late"))
            await asyncio.wait_for(task, 1)
            return received, channel.has_consumer

        received, attached = asyncio.run(scenario())
        assert received == [ShowMessage("early"), ShowMessage("late")]
        assert attached is False

    def test_second_consumer_is_rejected(self):
        async def scenario():
            channel = EventChannel()
            first = channel.consume()
            pending = asyncio.ensure_future(anext(first))
            await asyncio.sleep(0)
            try:
                with pytest.raises(ChannelBusyError):
                    await anext(channel.consume())
            finally:
                pending.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await pending
                await first.aclose()
            return channel.has_consumer

        assert asyncio.run(scenario()) is False

    def test_late_consumer_does_not_see_consumed_events(self):
        async def scenario():
            channel = EventChannel()
            channel.send(ShowMessage("once"))

            first = channel.consume()
            seen_first = await anext(first)
            await first.aclose()

            channel.send(ShowMessage("second"))
            second = channel.consume()
            seen_second = await anext(second)
            await second.aclose()
            return seen_first, seen_second

        assert asyncio.run(scenario()) == (ShowMessage("once"), ShowMessage("second"))
