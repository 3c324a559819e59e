"""In-process document store. Single event loop; default backend for development and tests."""

import copy
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from laundry_app.application.document_store import (
    Document,
    DocumentNotFoundError,
    SnapshotListener,
    resolve_server_timestamps,
)

_UNSET = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _MemorySubscription:
    def __init__(
        self,
        store: "InMemoryDocumentStore",
        collection: str,
        listener: SnapshotListener,
        field: Optional[str],
        value: Any,
    ) -> None:
        self._store = store
        self.collection = collection
        self.listener = listener
        self.field = field
        self.value = value
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._store._remove_subscription(self)


class InMemoryDocumentStore:
    """
    Implements DocumentStore with plain dicts. Reads return copies.
    Server timestamps are strictly increasing across writes.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._subscriptions: Dict[str, List[_MemorySubscription]] = {}
        self._clock = clock
        self._last_timestamp: Optional[datetime] = None
        self._logger = logger or logging.getLogger(__name__)

    def _server_now(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def _snapshot(self, collection: str, field: Optional[str], value: Any) -> List[Document]:
        return [
            Document(doc_id=key, data=copy.deepcopy(data))
            for key, data in self._collection(collection).items()
            if field is None or data.get(field, _UNSET) == value
        ]

    def _notify(self, collection: str) -> None:
        for subscription in list(self._subscriptions.get(collection, [])):
            if not subscription.active:
                continue
            try:
                subscription.listener(self._snapshot(collection, subscription.field, subscription.value))
            except Exception as e:
                self._logger.error(
                    "snapshot_listener_failed",
                    extra={"collection": collection, "error": str(e)},
                )

    def _remove_subscription(self, subscription: _MemorySubscription) -> None:
        listeners = self._subscriptions.get(subscription.collection, [])
        if subscription in listeners:
            listeners.remove(subscription)

    async def get(self, collection: str, key: str) -> Optional[Document]:
        data = self._collection(collection).get(key)
        if data is None:
            return None
        return Document(doc_id=key, data=copy.deepcopy(data))

    async def query(
        self,
        collection: str,
        field: Optional[str] = None,
        value: Any = None,
    ) -> List[Document]:
        return self._snapshot(collection, field, value)

    async def add(self, collection: str, fields: Dict[str, Any]) -> str:
        key = uuid.uuid4().hex
        await self.set(collection, key, fields)
        return key

    async def set(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        self._collection(collection)[key] = copy.deepcopy(
            resolve_server_timestamps(fields, self._server_now())
        )
        self._notify(collection)

    async def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        existing = self._collection(collection).get(key)
        if existing is None:
            raise DocumentNotFoundError(collection, key)
        existing.update(copy.deepcopy(resolve_server_timestamps(fields, self._server_now())))
        self._notify(collection)

    async def delete(self, collection: str, key: str) -> None:
        if self._collection(collection).pop(key, None) is not None:
            self._notify(collection)

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        field: Optional[str] = None,
        value: Any = None,
    ) -> _MemorySubscription:
        subscription = _MemorySubscription(self, collection, listener, field, value)
        self._subscriptions.setdefault(collection, []).append(subscription)
        listener(self._snapshot(collection, field, value))
        return subscription
