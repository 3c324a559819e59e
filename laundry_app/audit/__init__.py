"""Audit trail: immutable entries, repository protocol, best-effort logger. No FastAPI."""

from laundry_app.audit.logger import AuditLogger
from laundry_app.audit.models import AuditCategory, AuditLogEntry, ClientMetadata
from laundry_app.audit.repository import AuditRepository

__all__ = [
    "AuditLogger",
    "AuditCategory",
    "AuditLogEntry",
    "ClientMetadata",
    "AuditRepository",
]
