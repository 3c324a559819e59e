"""Credential recovery router: email step, then security-answer step."""

from typing import Annotated

from fastapi import APIRouter, Depends

from laundry_app.api.dependencies import get_recovery_service
from laundry_app.application.recovery_flow import RESET_EMAIL_SENT_MESSAGE
from laundry_app.application.recovery_service import RecoveryService
from laundry_app.domain.models.recovery import RecoveryState
from laundry_app.domain.schemas.recovery import (
    RecoveryAnswerRequest,
    RecoveryResponse,
    RecoveryStartRequest,
)

router = APIRouter()


@router.post("", response_model=RecoveryResponse)
async def start_recovery(
    body: RecoveryStartRequest,
    service: Annotated[RecoveryService, Depends(get_recovery_service)],
):
    """Unknown emails answer 404; no recovery session is kept for them."""
    snapshot = await service.start(body.email)
    return RecoveryResponse(
        recovery_id=snapshot.recovery_id,
        state=snapshot.state,
        question=snapshot.question,
    )


@router.post("/{recovery_id}/answer", response_model=RecoveryResponse)
async def answer_recovery(
    recovery_id: str,
    body: RecoveryAnswerRequest,
    service: Annotated[RecoveryService, Depends(get_recovery_service)],
):
    snapshot = await service.answer(recovery_id, body.answer)
    return RecoveryResponse(
        recovery_id=snapshot.recovery_id,
        state=snapshot.state,
        message=RESET_EMAIL_SENT_MESSAGE if snapshot.state is RecoveryState.COMPLETED else None,
    )
