"""Client-reported security events. Server attaches IP, user-agent and actor before storing."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from laundry_app.api.dependencies import get_audit_logger, get_client_metadata, get_optional_user
from laundry_app.application.session import CurrentUser
from laundry_app.audit.logger import AuditLogger
from laundry_app.audit.models import ClientMetadata
from laundry_app.domain.schemas.audit import LogEventRequest, LogEventResponse

LOG_RECORDED_MESSAGE = "Log event recorded."
LOG_FAILED_MESSAGE = "Failed to record log event."

router = APIRouter()


@router.post("", response_model=LogEventResponse)
async def record_log_event(
    body: LogEventRequest,
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
    client: Annotated[ClientMetadata, Depends(get_client_metadata)],
    user: Annotated[Optional[CurrentUser], Depends(get_optional_user)],
):
    """Sink failures answer success=false with a fixed message; the cause is only logged."""
    stored = await audit.record(
        body.event_type,
        body.event_action or body.event_type,
        success=body.success,
        actor_id=user.uid if user else None,
        actor_email=user.email if user else None,
        error_message=body.error_message,
        details=body.event_data,
        client=client,
    )
    return LogEventResponse(
        success=stored,
        message=LOG_RECORDED_MESSAGE if stored else LOG_FAILED_MESSAGE,
    )
