"""Best-effort audit logging for security-relevant events. No FastAPI."""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from laundry_app.audit.models import (
    ANONYMOUS_ACTOR,
    AuditCategory,
    AuditLogEntry,
    ClientMetadata,
)
from laundry_app.audit.repository import AuditRepository


async def drain_pending_writes(pending: Set[asyncio.Task]) -> None:
    """Wait for scheduled audit writes to settle. Used at shutdown and in tests."""
    loop = asyncio.get_running_loop()
    while True:
        tasks = [t for t in pending if t.get_loop() is loop and not t.done()]
        if not tasks:
            return
        await asyncio.gather(*tasks, return_exceptions=True)


class AuditLogger:
    """
    Writes immutable audit entries via repository.
    submit() and the category wrappers are fire-and-forget: the write runs as a
    background task and the caller never waits on the sink. record() awaits the
    write and is used where storing the entry is the operation itself.
    A failing sink is traced to the diagnostic logger and never reaches the caller.
    """

    def __init__(
        self,
        repository: AuditRepository,
        logger: Optional[logging.Logger] = None,
        pending: Optional[Set[asyncio.Task]] = None,
    ) -> None:
        self._repository = repository
        self._logger = logger or logging.getLogger(__name__)
        # Strong references keep scheduled writes alive until they finish.
        self._pending: Set[asyncio.Task] = pending if pending is not None else set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def record(
        self,
        category: AuditCategory | str,
        action: str,
        *,
        success: bool,
        actor_id: Optional[str] = None,
        actor_email: Optional[str] = None,
        error_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        client: Optional[ClientMetadata] = None,
    ) -> bool:
        """
        Append one entry and wait for the sink. Returns True when stored, False when the sink failed.
        category may be a free-form string for client-reported events.
        """
        entry = self._build_entry(
            category,
            action,
            success=success,
            actor_id=actor_id,
            actor_email=actor_email,
            error_message=error_message,
            details=details,
            client=client,
        )
        return await self._write(entry)

    def submit(
        self,
        category: AuditCategory | str,
        action: str,
        *,
        success: bool,
        actor_id: Optional[str] = None,
        actor_email: Optional[str] = None,
        error_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        client: Optional[ClientMetadata] = None,
    ) -> asyncio.Task:
        """Schedule one entry on the running loop and return immediately."""
        entry = self._build_entry(
            category,
            action,
            success=success,
            actor_id=actor_id,
            actor_email=actor_email,
            error_message=error_message,
            details=details,
            client=client,
        )
        task = asyncio.get_running_loop().create_task(self._write(entry))
        self._pending.add(task)
        task.add_done_callback(self._on_write_done)
        return task

    async def drain(self) -> None:
        await drain_pending_writes(self._pending)

    def auth(self, action: str, **fields: Any) -> asyncio.Task:
        return self.submit(AuditCategory.AUTHENTICATION, action, **fields)

    def validation(self, action: str, **fields: Any) -> asyncio.Task:
        return self.submit(AuditCategory.VALIDATION, action, **fields)

    def access(self, action: str, **fields: Any) -> asyncio.Task:
        return self.submit(AuditCategory.ACCESS_CONTROL, action, **fields)

    def error(self, action: str, **fields: Any) -> asyncio.Task:
        return self.submit(AuditCategory.ERROR, action, **fields)

    def _build_entry(
        self,
        category: AuditCategory | str,
        action: str,
        *,
        success: bool,
        actor_id: Optional[str],
        actor_email: Optional[str],
        error_message: Optional[str],
        details: Optional[Dict[str, Any]],
        client: Optional[ClientMetadata],
    ) -> AuditLogEntry:
        event_type = category.value if isinstance(category, AuditCategory) else str(category)
        return AuditLogEntry(
            event_type=event_type,
            event_action=action,
            success=success,
            actor_id=actor_id or ANONYMOUS_ACTOR,
            actor_email=actor_email,
            error_message=None if success else error_message,
            details=details,
            ip_address=client.ip_address if client else None,
            user_agent=client.user_agent if client else None,
        )

    async def _write(self, entry: AuditLogEntry) -> bool:
        try:
            await self._repository.append(entry)
        except Exception as e:
            self._logger.error(
                "audit_write_failed",
                extra={"event_type": entry.event_type, "event_action": entry.event_action, "error": str(e)},
            )
            return False
        return True

    def _on_write_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            self._logger.warning("audit_write_cancelled")
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("audit_write_failed", extra={"error": str(exc)})
