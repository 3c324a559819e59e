"""Audit tests: entry fields, immutability, sink failures never reach the caller, writes never block it."""

import asyncio
import time
from unittest.mock import AsyncMock

import pytest

from laundry_app.audit.logger import AuditLogger, drain_pending_writes
from laundry_app.audit.models import ANONYMOUS_ACTOR, AuditCategory, AuditLogEntry, ClientMetadata


class SlowAuditRepository:
    """Sink whose append takes `delay` seconds."""

    def __init__(self, delay: float):
        self.delay = delay
        self.entries = []

    async def append(self, entry):
        await asyncio.sleep(self.delay)
        self.entries.append(entry)
        return f"log-{len(self.entries)}"

    async def list_recent(self, limit=100):
        return list(reversed(self.entries))[:limit]


async def test_record_builds_entry(audit_logger, audit_repository):
    audit_logger.auth("login_success", success=True, actor_id="uid-1", actor_email="a@b.io")
    await audit_logger.drain()
    entry = audit_repository.entries[0]
    assert isinstance(entry, AuditLogEntry)
    assert entry.event_type == "auth"
    assert entry.event_action == "login_success"
    assert entry.actor_id == "uid-1"
    assert entry.timestamp is None
    with pytest.raises(AttributeError):
        entry.actor_id = "other"  # type: ignore[misc]


async def test_missing_actor_is_anonymous(audit_logger, audit_repository):
    audit_logger.validation("signup", success=False, error_message="bad")
    await audit_logger.drain()
    assert audit_repository.entries[0].actor_id == ANONYMOUS_ACTOR


async def test_error_message_dropped_on_success(audit_logger, audit_repository):
    audit_logger.access("role_change", success=True, error_message="ignored")
    await audit_logger.drain()
    assert audit_repository.entries[0].error_message is None


async def test_client_metadata_is_attached(audit_logger, audit_repository):
    stored = await audit_logger.record(
        AuditCategory.ERROR,
        "unhandled_exception",
        success=False,
        client=ClientMetadata(ip_address="10.0.0.1", user_agent="pytest"),
    )
    assert stored is True
    entry = audit_repository.entries[0]
    assert entry.ip_address == "10.0.0.1"
    assert entry.user_agent == "pytest"


async def test_free_form_event_type(audit_logger, audit_repository):
    await audit_logger.record("client_navigation", "page_view", success=True)
    assert audit_repository.entries[0].event_type == "client_navigation"


async def test_failing_sink_returns_false_and_does_not_raise():
    repository = AsyncMock()
    repository.append = AsyncMock(side_effect=RuntimeError("sink down"))
    audit = AuditLogger(repository=repository)
    assert await audit.record(AuditCategory.AUTHENTICATION, "login_failure", success=False) is False
    repository.append.assert_awaited_once()


async def test_failing_sink_in_background_is_contained():
    repository = AsyncMock()
    repository.append = AsyncMock(side_effect=RuntimeError("sink down"))
    audit = AuditLogger(repository=repository)
    task = audit.auth("login_failure", success=False)
    await audit.drain()
    assert task.result() is False
    assert audit.pending == 0


async def test_submit_does_not_wait_for_slow_sink():
    repository = SlowAuditRepository(delay=0.5)
    audit = AuditLogger(repository=repository)
    started = time.monotonic()
    audit.auth("login_success", success=True)
    assert time.monotonic() - started < 0.1
    assert repository.entries == []
    assert audit.pending == 1
    await audit.drain()
    assert len(repository.entries) == 1
    assert audit.pending == 0


async def test_loggers_sharing_pending_set_drain_together(audit_repository):
    pending = set()
    first = AuditLogger(audit_repository, pending=pending)
    second = AuditLogger(audit_repository, pending=pending)
    first.auth("login_success", success=True)
    second.error("unhandled_exception", success=False)
    assert len(pending) == 2
    await drain_pending_writes(pending)
    assert [e.event_action for e in audit_repository.entries] == ["login_success", "unhandled_exception"]
