"""Per-supplier card numbering.

Every new card gets ``supplier_card_number`` = previous number for that
supplier name + 1.  The counter is stored apart from the cards, so deleting
cards (one or all) never rewinds a supplier's sequence.

Backends (pick with ``settings.card_counter_backend``):
  database  → one row per supplier in ``supplier_counters``, bumped with a
              single INSERT … ON CONFLICT DO UPDATE … RETURNING.  Runs in
              the same transaction as the card insert.
  redis     → HINCRBY on one hash, field = supplier name.
  memory    → asyncio.Lock + dict, for tests and one-off scripts
              (InMemoryCounterStore, never selected by settings).

All three are atomic per supplier: two concurrent intakes for the same
supplier can never receive the same number.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Protocol

import redis.asyncio as redis
from sqlalchemy import case
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.supplier_counter import SupplierCounter

logger = logging.getLogger(__name__)

COUNTER_HASH = "kartat:supplier_counters"

# Raise a hash field to ARGV[2] unless it is already higher
_RAISE_TO_SCRIPT = """
local current = tonumber(redis.call('HGET', KEYS[1], ARGV[1]) or '0')
local wanted = tonumber(ARGV[2])
if current < wanted then
    redis.call('HSET', KEYS[1], ARGV[1], wanted)
    return wanted
end
return current
"""


class SupplierCounterStore(Protocol):
    async def next_number(self, supplier_name: str) -> int:
        """Atomically advance and return the supplier's counter."""
        ...

    async def ensure_at_least(self, supplier_name: str, value: int) -> None:
        """Raise the supplier's counter to ``value`` if it is lower."""
        ...


def counter_key(supplier_name: str | None) -> str:
    return (supplier_name or "").strip()


# ── Database ─────────────────────────────────────────────────


def _dialect_insert(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise RuntimeError(f"Unsupported database dialect for counters: {dialect}")


class DatabaseCounterStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def next_number(self, supplier_name: str) -> int:
        insert = _dialect_insert(self.db)
        now = datetime.utcnow()
        stmt = insert(SupplierCounter).values(
            supplier_name=counter_key(supplier_name),
            card_count=1,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["supplier_name"],
            set_={
                "card_count": SupplierCounter.card_count + 1,
                "updated_at": now,
            },
        ).returning(SupplierCounter.card_count)

        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def ensure_at_least(self, supplier_name: str, value: int) -> None:
        insert = _dialect_insert(self.db)
        now = datetime.utcnow()
        stmt = insert(SupplierCounter).values(
            supplier_name=counter_key(supplier_name),
            card_count=value,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["supplier_name"],
            set_={
                "card_count": case(
                    (SupplierCounter.card_count < value, value),
                    else_=SupplierCounter.card_count,
                ),
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)


# ── Redis ────────────────────────────────────────────────────

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create the shared Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis():
    """Close the Redis client (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


class RedisCounterStore:
    def __init__(self, client: redis.Redis, key: str = COUNTER_HASH):
        self.client = client
        self.key = key

    async def next_number(self, supplier_name: str) -> int:
        return int(await self.client.hincrby(self.key, counter_key(supplier_name), 1))

    async def ensure_at_least(self, supplier_name: str, value: int) -> None:
        await self.client.eval(
            _RAISE_TO_SCRIPT, 1, self.key, counter_key(supplier_name), value
        )


# ── In-memory ────────────────────────────────────────────────


class InMemoryCounterStore:
    def __init__(self, initial: dict[str, int] | None = None):
        self._counts: dict[str, int] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def next_number(self, supplier_name: str) -> int:
        key = counter_key(supplier_name)
        async with self._lock:
            self._counts[key] = self._counts.get(key, 0) + 1
            return self._counts[key]

    async def ensure_at_least(self, supplier_name: str, value: int) -> None:
        key = counter_key(supplier_name)
        async with self._lock:
            self._counts[key] = max(self._counts.get(key, 0), value)

    def current(self, supplier_name: str) -> int:
        return self._counts.get(counter_key(supplier_name), 0)


async def get_counter_store(db: AsyncSession) -> SupplierCounterStore:
    """Counter store for the configured backend, bound to ``db`` if SQL."""
    backend = settings.card_counter_backend
    if backend == "redis":
        return RedisCounterStore(await get_redis())
    return DatabaseCounterStore(db)
