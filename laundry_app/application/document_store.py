"""Document store protocol. Application layer depends on this; infrastructure implements it."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol

USERS_COLLECTION = "users"
SECURITY_QUESTIONS_COLLECTION = "public_security_questions"
ORDERS_COLLECTION = "orders"
LOGS_COLLECTION = "logs"


class _ServerTimestamp:
    """Sentinel field value; the store writes its own current UTC time in its place."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentNotFoundError(Exception):
    """Raised by update() when the key does not exist."""

    def __init__(self, collection: str, key: str) -> None:
        self.collection = collection
        self.key = key
        self.message = f"Document {collection}/{key} not found"
        super().__init__(self.message)


@dataclass(frozen=True)
class Document:
    doc_id: str
    data: Dict[str, Any]


SnapshotListener = Callable[[List[Document]], None]


class Subscription(Protocol):
    def unsubscribe(self) -> None:
        """Stop delivering snapshots. Safe to call more than once."""
        ...


class DocumentStore(Protocol):
    """Key/document store with query-by-field and change notification."""

    async def get(self, collection: str, key: str) -> Optional[Document]:
        ...

    async def query(
        self,
        collection: str,
        field: Optional[str] = None,
        value: Any = None,
    ) -> List[Document]:
        """All documents whose field equals value (all documents when field is None). Order is unspecified."""
        ...

    async def add(self, collection: str, fields: Dict[str, Any]) -> str:
        """Create a document under a generated id. Returns the id."""
        ...

    async def set(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        """Create or replace the document at key."""
        ...

    async def update(self, collection: str, key: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document. Raises DocumentNotFoundError if missing."""
        ...

    async def delete(self, collection: str, key: str) -> None:
        ...

    async def subscribe(
        self,
        collection: str,
        listener: SnapshotListener,
        field: Optional[str] = None,
        value: Any = None,
    ) -> Subscription:
        """Deliver the current snapshot, then a full snapshot after every write, until unsubscribed."""
        ...


def resolve_server_timestamps(fields: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """Copy of fields with every SERVER_TIMESTAMP (including nested dicts) replaced by now."""
    resolved: Dict[str, Any] = {}
    for name, value in fields.items():
        if value is SERVER_TIMESTAMP:
            resolved[name] = now
        elif isinstance(value, dict):
            resolved[name] = resolve_server_timestamps(value, now)
        else:
            resolved[name] = value
    return resolved
