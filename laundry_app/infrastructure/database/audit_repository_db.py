"""DB-backed audit repository. Appends rows to the audit_logs table."""

from datetime import timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from laundry_app.audit.models import AuditLogEntry
from laundry_app.infrastructure.database.models import AuditLogRow


def _to_entry(row: AuditLogRow) -> AuditLogEntry:
    timestamp = row.timestamp
    # SQLite hands back naive UTC.
    if timestamp is not None and timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return AuditLogEntry(
        event_type=row.event_type,
        event_action=row.event_action,
        success=row.success,
        actor_id=row.actor_id,
        actor_email=row.actor_email,
        error_message=row.error_message,
        details=row.details,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        timestamp=timestamp,
        entry_id=row.entry_id,
    )


class DbAuditRepository:
    """Implements AuditRepository. One short-lived session per call; no update or delete paths."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: AuditLogEntry) -> str:
        row = AuditLogRow(
            event_type=entry.event_type,
            event_action=entry.event_action,
            success=entry.success,
            actor_id=entry.actor_id,
            actor_email=entry.actor_email,
            error_message=entry.error_message,
            details=entry.details,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.flush()
            await session.commit()
            return row.entry_id

    async def list_recent(self, limit: int = 100) -> List[AuditLogEntry]:
        stmt = (
            select(AuditLogRow)
            .order_by(AuditLogRow.timestamp.desc(), AuditLogRow.id.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [_to_entry(row) for row in result.scalars().all()]
