"""Audit repository on the document store (logs collection)."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from laundry_app.application.document_store import (
    LOGS_COLLECTION,
    SERVER_TIMESTAMP,
    Document,
    DocumentStore,
)
from laundry_app.audit.models import ANONYMOUS_ACTOR, AuditLogEntry

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _to_entry(document: Document) -> AuditLogEntry:
    data = document.data
    timestamp = data.get("timestamp")
    return AuditLogEntry(
        event_type=data.get("eventType", ""),
        event_action=data.get("eventAction", ""),
        success=bool(data.get("success", False)),
        actor_id=data.get("userId") or ANONYMOUS_ACTOR,
        actor_email=data.get("userEmail"),
        error_message=data.get("errorMessage"),
        details=data.get("details"),
        ip_address=data.get("ipAddress"),
        user_agent=data.get("userAgent"),
        timestamp=timestamp if isinstance(timestamp, datetime) else None,
        entry_id=document.doc_id,
    )


class DocumentAuditRepository:
    """Implements AuditRepository. Documents are only ever added."""

    def __init__(self, documents: DocumentStore) -> None:
        self._documents = documents

    async def append(self, entry: AuditLogEntry) -> str:
        fields: Dict[str, Any] = {
            "eventType": entry.event_type,
            "eventAction": entry.event_action,
            "success": entry.success,
            "userId": entry.actor_id,
            "userEmail": entry.actor_email,
            "errorMessage": entry.error_message,
            "details": entry.details,
            "ipAddress": entry.ip_address,
            "userAgent": entry.user_agent,
            "timestamp": SERVER_TIMESTAMP,
        }
        return await self._documents.add(LOGS_COLLECTION, fields)

    async def list_recent(self, limit: int = 100) -> List[AuditLogEntry]:
        documents = await self._documents.query(LOGS_COLLECTION)
        entries = [_to_entry(d) for d in documents]
        entries.sort(key=lambda e: e.timestamp or _EPOCH, reverse=True)
        return entries[:limit]
