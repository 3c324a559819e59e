"""Supervisor for unhandled failures: incident id, audit entry, fallback instead of a crash."""

import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from laundry_app.audit.logger import AuditLogger
from laundry_app.audit.models import ClientMetadata

T = TypeVar("T")

FALLBACK_MESSAGE = (
    "Something went wrong. The application encountered an unexpected error. "
    "Please try refreshing the page."
)
ACTION_UNHANDLED_EXCEPTION = "unhandled_exception"

_BASE36 = string.digits + string.ascii_lowercase


def new_incident_id(now_ms: Optional[int] = None) -> str:
    """err-<epoch milliseconds>-<9 random base36 characters>."""
    millis = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"err-{millis}-{suffix}"


@dataclass(frozen=True)
class Incident:
    """Fallback shown in place of the failed operation. reload offers a full retry."""

    incident_id: str
    message: str = FALLBACK_MESSAGE
    reload: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "incident_id": self.incident_id, "reload": self.reload}


class ErrorBoundary:
    """Catches any exception inside its scope, reports it, and substitutes an Incident."""

    def __init__(self, audit: AuditLogger, logger: Optional[logging.Logger] = None) -> None:
        self._audit = audit
        self._logger = logger or logging.getLogger(__name__)

    def capture(
        self,
        exc: BaseException,
        *,
        context: Optional[Dict[str, Any]] = None,
        actor_id: Optional[str] = None,
        client: Optional[ClientMetadata] = None,
    ) -> Incident:
        """Report exc before the fallback is shown. Never raises."""
        incident = Incident(incident_id=new_incident_id())
        self._logger.error(
            ACTION_UNHANDLED_EXCEPTION,
            exc_info=exc,
            extra={"incident_id": incident.incident_id},
        )
        self._audit.error(
            ACTION_UNHANDLED_EXCEPTION,
            success=False,
            actor_id=actor_id,
            error_message=str(exc) or type(exc).__name__,
            details={
                "incident_id": incident.incident_id,
                "exception_type": type(exc).__name__,
                "context": context or {},
            },
            client=client,
        )
        return incident

    async def run(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        context: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Union[T, Incident]:
        """Await func; on any exception return the Incident instead."""
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            return self.capture(e, context=context)
