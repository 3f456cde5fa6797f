"""Per-supplier card counter store tests."""

import asyncio

import pytest
from sqlalchemy import select

from app.models.supplier_counter import SupplierCounter
from app.utils.numbering import (
    DatabaseCounterStore,
    InMemoryCounterStore,
    RedisCounterStore,
    counter_key,
)


class FakeRedis:
    """Just enough of redis.asyncio.Redis for RedisCounterStore."""

    def __init__(self):
        self.hashes: dict[str, dict[str, int]] = {}
        self.eval_calls = []

    async def hincrby(self, key, field, amount=1):
        bucket = self.hashes.setdefault(key, {})
        bucket[field] = bucket.get(field, 0) + amount
        return bucket[field]

    async def eval(self, script, numkeys, key, field, value):
        self.eval_calls.append((numkeys, key, field, value))
        bucket = self.hashes.setdefault(key, {})
        bucket[field] = max(bucket.get(field, 0), int(value))
        return bucket[field]


@pytest.mark.unit
class TestInMemoryCounterStore:

    async def test_sequence_per_supplier(self):
        store = InMemoryCounterStore()
        assert await store.next_number("بكر صقر") == 1
        assert await store.next_number("بكر صقر") == 2
        assert await store.next_number("محمود فريد") == 1

    async def test_supplier_name_is_trimmed(self):
        store = InMemoryCounterStore()
        await store.next_number("بكر صقر")
        assert await store.next_number("  بكر صقر ") == 2

    async def test_ensure_at_least_only_raises(self):
        store = InMemoryCounterStore({"بكر صقر": 4})
        await store.ensure_at_least("بكر صقر", 10)
        await store.ensure_at_least("بكر صقر", 3)
        assert store.current("بكر صقر") == 10
        assert await store.next_number("بكر صقر") == 11

    async def test_concurrent_callers_get_distinct_numbers(self):
        store = InMemoryCounterStore()
        numbers = await asyncio.gather(*(store.next_number("x") for _ in range(50)))
        assert sorted(numbers) == list(range(1, 51))


@pytest.mark.unit
class TestDatabaseCounterStore:

    async def test_upsert_sequence(self, db_session):
        store = DatabaseCounterStore(db_session)
        assert await store.next_number("بكر صقر") == 1
        assert await store.next_number("بكر صقر") == 2
        assert await store.next_number("ثلاجه فلاحين") == 1

        row = await db_session.get(SupplierCounter, "بكر صقر")
        assert row.card_count == 2

    async def test_empty_supplier_has_its_own_sequence(self, db_session):
        store = DatabaseCounterStore(db_session)
        assert await store.next_number("") == 1
        assert await store.next_number("   ") == 2

    async def test_ensure_at_least(self, db_session):
        store = DatabaseCounterStore(db_session)
        await store.next_number("محمود فريد")
        await store.ensure_at_least("محمود فريد", 5)
        assert await store.next_number("محمود فريد") == 6
        await store.ensure_at_least("محمود فريد", 3)
        assert await store.next_number("محمود فريد") == 7

    async def test_ensure_at_least_creates_row(self, db_session):
        store = DatabaseCounterStore(db_session)
        await store.ensure_at_least("جديد", 41)
        result = await db_session.execute(
            select(SupplierCounter.card_count).where(SupplierCounter.supplier_name == "جديد")
        )
        assert result.scalar_one() == 41


@pytest.mark.unit
class TestRedisCounterStore:

    async def test_hincrby_sequence(self):
        client = FakeRedis()
        store = RedisCounterStore(client, key="test:counters")
        assert await store.next_number(" بكر صقر") == 1
        assert await store.next_number("بكر صقر") == 2
        assert client.hashes["test:counters"] == {"بكر صقر": 2}

    async def test_ensure_at_least_uses_script(self):
        client = FakeRedis()
        store = RedisCounterStore(client, key="test:counters")
        await store.ensure_at_least("محمود فريد", 9)
        assert client.eval_calls == [(1, "test:counters", "محمود فريد", 9)]
        assert await store.next_number("محمود فريد") == 10


def test_counter_key():
    assert counter_key(None) == ""
    assert counter_key("  بكر صقر  ") == "بكر صقر"
