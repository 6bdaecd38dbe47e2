"""Line-item stores: memory and SQLAlchemy (in-memory SQLite)."""

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest
from kungfu import Ok

from cartflow.cart import CartStore
from cartflow.events import EventChannel
from cartflow.store import ChangeFeed, MemoryLineItemStore, SQLAlchemyLineItemStore, create_database


def _ok(result):
    assert isinstance(result, Ok), result
    return result.value


async def _exercise(store, mouse, keyboard):
    """Same scenario against any LineItemStore; returns what it observed."""
    first = _ok(await store.increment(mouse, 1))
    second = _ok(await store.increment(mouse, 2))
    _ok(await store.increment(keyboard, 1))
    listed = _ok(await store.list_items())
    updated = _ok(await store.set_quantity(keyboard.product_id, 4))
    missing = _ok(await store.set_quantity(99, 4))
    deleted = _ok(await store.delete(mouse.product_id))
    deleted_again = _ok(await store.delete(mouse.product_id))
    fetched = _ok(await store.get(keyboard.product_id))
    cleared = _ok(await store.delete_all())
    remaining = _ok(await store.list_items())
    return first, second, listed, updated, missing, deleted, deleted_again, fetched, cleared, remaining


def _check(observed, mouse, keyboard):
    first, second, listed, updated, missing, deleted, deleted_again, fetched, cleared, remaining = observed

    assert first.quantity == 1
    assert second.quantity == 3
    assert [(i.product_id, i.quantity) for i in listed] == [(1, 3), (2, 1)]
    assert listed[0].unit_price == mouse.unit_price
    assert updated.quantity == 4
    assert missing is None
    assert deleted is True
    assert deleted_again is False
    assert fetched.quantity == 4
    assert fetched.name == keyboard.name
    assert cleared == 1
    assert remaining == []


class TestChangeFeed:
    def test_publish_bumps_version(self):
        feed = ChangeFeed()
        assert feed.version == 0
        assert feed.publish() == 1
        assert feed.version == 1

    def test_wait_past_wakes_on_publish(self):
        async def scenario():
            feed = ChangeFeed()
            waiter = asyncio.create_task(feed.wait_past(0))
            await asyncio.sleep(0)
            assert not waiter.done()
            feed.publish()
            return await asyncio.wait_for(waiter, 1)

        assert asyncio.run(scenario()) == 1

    def test_wait_past_returns_immediately_when_behind(self):
        async def scenario():
            feed = ChangeFeed()
            feed.publish()
            feed.publish()
            return await asyncio.wait_for(feed.wait_past(0), 1)

        assert asyncio.run(scenario()) == 2


class TestMemoryLineItemStore:
    def test_operations(self, mouse, keyboard):
        observed = asyncio.run(_exercise(MemoryLineItemStore(), mouse, keyboard))
        _check(observed, mouse, keyboard)

    def test_writes_publish_and_noops_do_not(self, mouse):
        async def scenario():
            store = MemoryLineItemStore()
            await store.increment(mouse, 1)
            after_insert = store.feed.version
            await store.set_quantity(99, 3)
            await store.delete(99)
            return after_insert, store.feed.version

        after_insert, final = asyncio.run(scenario())
        assert after_insert == 1
        assert final == 1


@pytest.mark.sqlalchemy
class TestSQLAlchemyLineItemStore:
    def test_operations(self, mouse, keyboard):
        async def scenario():
            session_factory, engine = await create_database()
            try:
                return await _exercise(SQLAlchemyLineItemStore(session_factory), mouse, keyboard)
            finally:
                await engine.dispose()

        _check(asyncio.run(scenario()), mouse, keyboard)

    def test_concurrent_increments_sum_into_one_row(self, mouse):
        async def scenario():
            session_factory, engine = await create_database()
            try:
                store = SQLAlchemyLineItemStore(session_factory)
                await asyncio.gather(*(store.increment(mouse, 1) for _ in range(10)))
                return _ok(await store.list_items())
            finally:
                await engine.dispose()

        items = asyncio.run(scenario())
        assert len(items) == 1
        assert items[0].quantity == 10

    def test_rows_survive_a_new_store_on_same_database(self, mouse):
        async def scenario():
            session_factory, engine = await create_database()
            try:
                await SQLAlchemyLineItemStore(session_factory).increment(mouse, 2)
                return _ok(await SQLAlchemyLineItemStore(session_factory).list_items())
            finally:
                await engine.dispose()

        items = asyncio.run(scenario())
        assert [(i.product_id, i.quantity) for i in items] == [(1, 2)]

    def test_failure_is_returned_not_raised(self, mouse):
        async def scenario():
            session_factory, engine = await create_database()
            store = SQLAlchemyLineItemStore(session_factory)
            # A fresh in-memory connection has no tables
            await engine.dispose()
            version = store.feed.version
            result = await store.increment(mouse, 1)
            await engine.dispose()
            return result, version, store.feed.version

        result, before, after = asyncio.run(scenario())
        assert not isinstance(result, Ok)
        assert "increment" in result.error.message
        assert before == after

    def test_reads_interleaved_with_adds_lose_nothing(self, mouse):
        async def scenario():
            session_factory, engine = await create_database()
            try:
                cart = CartStore(SQLAlchemyLineItemStore(session_factory), EventChannel(capacity=64))
                results = await asyncio.gather(
                    *(
                        op
                        for _ in range(30)
                        for op in (cart.add_or_increment(mouse), cart.snapshot())
                    )
                )
                final = _ok(await cart.snapshot())
                return results, final
            finally:
                await engine.dispose()

        results, final = asyncio.run(scenario())
        assert all(isinstance(r, Ok) for r in results)
        assert final.find(mouse.product_id).quantity == 30

    def test_prices_round_trip_exactly(self, mouse):
        priced = replace(mouse, unit_price=Decimal("19999.99"))

        async def scenario():
            session_factory, engine = await create_database()
            try:
                store = SQLAlchemyLineItemStore(session_factory)
                await store.increment(priced, 3)
                return _ok(await store.list_items())
            finally:
                await engine.dispose()

        (item,) = asyncio.run(scenario())
        assert item.unit_price == Decimal("19999.99")
        assert item.subtotal == Decimal("59999.97")
