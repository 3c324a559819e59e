"""User account model. Roles, login attempts and the merged profile view."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    """Account role. New accounts start as CUSTOMER; only administrators change roles."""

    CUSTOMER = "Customer"
    MANAGER = "Manager"
    ADMINISTRATOR = "Administrator"


DEFAULT_ROLE = Role.CUSTOMER


def parse_role(value: Any) -> Optional[Role]:
    """Return Role for a stored value, or None when missing or unrecognized."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class LoginAttempt:
    """Outcome of the most recent login attempt. Overwritten on every attempt."""

    timestamp: datetime
    success: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "success": self.success}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["LoginAttempt"]:
        if not data or not isinstance(data.get("timestamp"), datetime):
            return None
        return cls(timestamp=data["timestamp"], success=bool(data.get("success")))


@dataclass(frozen=True)
class UserProfile:
    """
    Authenticated user as seen by the application: identity-provider fields
    joined with the stored user record. role is None when no record exists.
    """

    uid: str
    email: str
    display_name: Optional[str]
    role: Optional[Role]
    created_at: Optional[datetime] = None
    last_password_change: Optional[datetime] = None
    last_login_attempt: Optional[LoginAttempt] = None

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.MANAGER, Role.ADMINISTRATOR)
