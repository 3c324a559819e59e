"""Immutable audit log entry. Domain-level immutability."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

ANONYMOUS_ACTOR = "anonymous"


class AuditCategory(str, Enum):
    """eventType of an audit entry."""

    AUTHENTICATION = "auth"
    VALIDATION = "validation"
    ACCESS_CONTROL = "access_control"
    ERROR = "error"


@dataclass(frozen=True)
class ClientMetadata:
    """Network and agent details observed by the server on the raw request."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class AuditLogEntry:
    """
    Append-only record of a security-relevant event.
    timestamp is assigned by the store; it is None until the entry is read back.
    ip_address/user_agent are only set by server-side entry points.
    """

    event_type: str
    event_action: str
    success: bool
    actor_id: str = ANONYMOUS_ACTOR
    actor_email: Optional[str] = None
    error_message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: Optional[datetime] = None
    entry_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON responses and logging."""
        return {
            "entry_id": self.entry_id,
            "event_type": self.event_type,
            "event_action": self.event_action,
            "success": self.success,
            "actor_id": self.actor_id,
            "actor_email": self.actor_email,
            "error_message": self.error_message,
            "details": self.details,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
