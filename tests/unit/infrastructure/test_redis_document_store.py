"""Tests for RedisDocumentStore and the tagged JSON codec against an in-memory Redis fake."""

from datetime import datetime, timezone

import pytest

from laundry_app.application.document_store import SERVER_TIMESTAMP, DocumentNotFoundError
from laundry_app.infrastructure.documents.codec import decode_document, encode_document
from laundry_app.infrastructure.documents.redis_store import RedisDocumentStore


class FakeRedis:
    """Hash and publish subset of RedisClient."""

    def __init__(self):
        self.hashes: dict[str, dict[str, str]] = {}
        self.published: list[tuple[str, str]] = []

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value

    async def hget(self, key, field):
        return self.hashes.get(key, {}).get(field)

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def hdel(self, key, field):
        self.hashes.get(key, {}).pop(field, None)

    async def publish(self, channel, message):
        self.published.append((channel, message))


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(fake_redis):
    return RedisDocumentStore(fake_redis)


def test_codec_preserves_datetimes():
    at = datetime(2026, 5, 1, 9, 30, tzinfo=timezone.utc)
    data = {"created_at": at, "attempt": {"timestamp": at, "success": True}, "name": "x"}
    assert decode_document(encode_document(data)) == data


async def test_set_and_get_round_trip(store, fake_redis):
    await store.set("users", "u1", {"email": "a@b.io", "created_at": SERVER_TIMESTAMP})
    document = await store.get("users", "u1")
    assert document.data["email"] == "a@b.io"
    assert isinstance(document.data["created_at"], datetime)
    assert "u1" in fake_redis.hashes["docs:users"]
    assert fake_redis.published == [("docs-changed:users", "u1")]


async def test_update_merges_and_missing_raises(store):
    await store.set("users", "u1", {"email": "a@b.io", "role": "Customer"})
    await store.update("users", "u1", {"role": "Manager"})
    assert (await store.get("users", "u1")).data == {"email": "a@b.io", "role": "Manager"}
    with pytest.raises(DocumentNotFoundError):
        await store.update("users", "u2", {"role": "Manager"})


async def test_query_and_delete(store):
    key = await store.add("orders", {"customer_id": "c1"})
    await store.add("orders", {"customer_id": "c2"})
    assert [d.doc_id for d in await store.query("orders", "customer_id", "c1")] == [key]
    await store.delete("orders", key)
    assert await store.get("orders", key) is None
