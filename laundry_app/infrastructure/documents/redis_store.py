"""Redis-backed document store. One hash per collection; change notifications over pub/sub."""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from laundry_app.application.document_store import (
    Document,
    DocumentNotFoundError,
    SnapshotListener,
    resolve_server_timestamps,
)
from laundry_app.infrastructure.cache.redis_client import RedisClient
from laundry_app.infrastructure.documents.codec import decode_document, encode_document

DOCUMENT_KEY_PREFIX = "docs:"
CHANGE_CHANNEL_PREFIX = "docs-changed:"


class _RedisSubscription:
    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    def unsubscribe(self) -> None:
        if not self._task.done():
            self._task.cancel()


class RedisDocumentStore:
    """
    Implements DocumentStore on Redis hashes (docs:<collection> -> key -> JSON).
    update() is read-merge-write and not atomic across concurrent writers.
    """

    def __init__(self, redis_client: RedisClient, logger: Optional[logging.Logger] = None) -> None:
        self._redis = redis_client
        self._logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _key(collection: str) -> str:
        return f"{DOCUMENT_KEY_PREFIX}{collection}"

    @staticmethod
    def _channel(collection: str) -> str:
        return f"{CHANGE_CHANNEL_PREFIX}{collection}"

    async def _write(self, collection: str, key: str, data: Dict[str, Any]) -> None:
        await self._redis.hset(self._key(collection), key, encode_document(data))
        await self._redis.publish(self._channel(collection), key)

    async def get(self, collection: str, key: str) -> Optional[Document]:
        raw = await self._redis.hget(self._key(collection), key)
        if raw is None:
            return None
        return Document(doc_id=key, data=decode_document(raw))

    async def query(
        self,
        collection: str,
        field: Optional[str] = None,
        value: Any = None,
    ) -> List[Document]:
        raw_documents = await self._redis.hgetall(self._key(collection))
        documents = [Document(doc_id=k, data=decode_document(v)) for k, v in raw_documents.items()]
        if field is None:
            return documents
        return [d for d in documents if field in d.data and d.data[field] == value]

    async def add(self, collection: str, fields: Dict[str, Any]) -> str:
        key = uuid.uuid4().hex
        await self.set(collection, key, fields)
        return key

    async def set(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        await self._write(collection, key, resolve_server_timestamps(fields, datetime.now(timezone.utc)))

    async def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        existing = await self.get(collection, key)
        if existing is None:
            raise DocumentNotFoundError(collection, key)
        merged = {**existing.data, **resolve_server_timestamps(fields, datetime.now(timezone.utc))}
        await self._write(collection, key, merged)

    async def delete(self, collection: str, key: str) -> None:
        await self._redis.hdel(self._key(collection), key)
        await self._redis.publish(self._channel(collection), key)

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        field: Optional[str] = None,
        value: Any = None,
    ) -> _RedisSubscription:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel(collection))
        listener(await self.query(collection, field, value))
        task = asyncio.create_task(self._listen(pubsub, collection, listener, field, value))
        return _RedisSubscription(task)

    async def _listen(
        self,
        pubsub,
        collection: str,
        listener: SnapshotListener,
        field: Optional[str],
        value: Any,
    ) -> None:
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    listener(await self.query(collection, field, value))
                except Exception as e:
                    self._logger.error(
                        "snapshot_listener_failed",
                        extra={"collection": collection, "error": str(e)},
                    )
        finally:
            await pubsub.unsubscribe(self._channel(collection))
            await pubsub.aclose()
