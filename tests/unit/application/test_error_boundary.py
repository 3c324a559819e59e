"""Unit tests for ErrorBoundary: incident ids, audit reporting, fallback instead of crash."""

import re

from laundry_app.application.error_boundary import FALLBACK_MESSAGE, ErrorBoundary, Incident, new_incident_id

INCIDENT_PATTERN = re.compile(r"^err-\d+-[0-9a-z]{9}$")


def test_incident_id_format():
    assert INCIDENT_PATTERN.match(new_incident_id())
    assert new_incident_id(1700000000000).startswith("err-1700000000000-")


async def test_run_returns_result_when_no_error(audit_logger, audit_repository):
    boundary = ErrorBoundary(audit_logger)

    async def ok(x):
        return x * 2

    assert await boundary.run(ok, 21) == 42
    await audit_logger.drain()
    assert audit_repository.entries == []


async def test_run_captures_exception(audit_logger, audit_repository):
    boundary = ErrorBoundary(audit_logger)

    async def explode():
        raise KeyError("profile")

    result = await boundary.run(explode, context={"screen": "orders"})
    await audit_logger.drain()
    assert isinstance(result, Incident)
    assert result.reload is True
    assert result.to_dict()["detail"] == FALLBACK_MESSAGE
    entry = audit_repository.entries[-1]
    assert entry.event_type == "error"
    assert entry.event_action == "unhandled_exception"
    assert entry.details["incident_id"] == result.incident_id
    assert entry.details["context"] == {"screen": "orders"}


async def test_capture_survives_audit_sink_failure(audit_logger, audit_repository):
    audit_repository.fail = True
    incident = ErrorBoundary(audit_logger).capture(RuntimeError("boom"))
    await audit_logger.drain()
    assert INCIDENT_PATTERN.match(incident.incident_id)
