"""Tests for recovery session stores: in-memory expiry and Redis key/TTL usage."""

import json
from dataclasses import replace
from unittest.mock import AsyncMock

from laundry_app.application.recovery_flow import RecoverySnapshot
from laundry_app.domain.models.recovery import RecoveryState
from laundry_app.infrastructure.cache.recovery_store_memory import InMemoryRecoverySessionStore
from laundry_app.infrastructure.cache.recovery_store_redis import RedisRecoverySessionStore

SNAPSHOT = RecoverySnapshot(
    recovery_id="r1",
    state=RecoveryState.AWAITING_ANSWER,
    email="a@b.io",
    question="In what city were you born?",
    answer_hash="ab" * 32,
)


async def test_memory_store_expires_entries():
    now = [100.0]
    store = InMemoryRecoverySessionStore(clock=lambda: now[0])
    await store.save(SNAPSHOT, ttl_seconds=30)
    assert await store.get("r1") == SNAPSHOT
    now[0] = 130.0
    assert await store.get("r1") is None


async def test_memory_store_evicts_abandoned_entries_on_save():
    now = [0.0]
    store = InMemoryRecoverySessionStore(clock=lambda: now[0])
    for i in range(1000):
        await store.save(replace(SNAPSHOT, recovery_id=f"r-{i}"), ttl_seconds=900)
    assert len(store) == 1000
    now[0] = 10000.0
    await store.save(SNAPSHOT, ttl_seconds=900)
    assert len(store) == 1
    assert await store.get("r1") == SNAPSHOT


async def test_memory_store_resave_extends_expiry():
    now = [0.0]
    store = InMemoryRecoverySessionStore(clock=lambda: now[0])
    await store.save(SNAPSHOT, ttl_seconds=30)
    now[0] = 20.0
    await store.save(SNAPSHOT, ttl_seconds=30)
    now[0] = 40.0
    await store.save(replace(SNAPSHOT, recovery_id="r2"), ttl_seconds=30)
    assert await store.get("r1") == SNAPSHOT


async def test_memory_store_delete():
    store = InMemoryRecoverySessionStore()
    await store.save(SNAPSHOT, ttl_seconds=30)
    await store.delete("r1")
    await store.delete("r1")
    assert await store.get("r1") is None


async def test_redis_store_uses_ttl_and_round_trips():
    redis = AsyncMock()
    store = RedisRecoverySessionStore(redis)
    await store.save(SNAPSHOT, ttl_seconds=900)
    key, raw = redis.set_cache.call_args[0]
    assert key == "recovery:r1"
    assert redis.set_cache.call_args[1] == {"ttl": 900}

    redis.get_cache = AsyncMock(return_value=raw)
    assert await store.get("r1") == SNAPSHOT
    assert json.loads(raw)["state"] == "awaiting_answer"

    redis.get_cache = AsyncMock(return_value=None)
    assert await store.get("r1") is None

    await store.delete("r1")
    redis.delete_key.assert_awaited_once_with("recovery:r1")
