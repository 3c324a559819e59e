"""Audit repository protocol. Audit layer depends on this; infrastructure implements it."""

from typing import List, Protocol

from laundry_app.audit.models import AuditLogEntry


class AuditRepository(Protocol):
    """Append-only store for audit entries. No update or delete."""

    async def append(self, entry: AuditLogEntry) -> str:
        """Persist entry with a store-assigned timestamp. Returns the new entry id."""
        ...

    async def list_recent(self, limit: int = 100) -> List[AuditLogEntry]:
        """Return up to limit entries, newest first."""
        ...
