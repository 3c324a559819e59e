"""Pydantic schemas for the credential recovery endpoints."""

from typing import Optional

from pydantic import BaseModel

from laundry_app.domain.models.recovery import RecoveryState


class RecoveryStartRequest(BaseModel):
    email: str = ""


class RecoveryAnswerRequest(BaseModel):
    answer: str = ""


class RecoveryResponse(BaseModel):
    """Client view of a recovery flow. The stored answer digest is never included."""

    recovery_id: str
    state: RecoveryState
    question: Optional[str] = None
    message: Optional[str] = None
