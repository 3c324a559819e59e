"""Pydantic schemas for audit ingestion and the admin endpoints."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from laundry_app.domain.models.user import Role


class LogEventRequest(BaseModel):
    """Client-reported security event. event_type is required; everything else is optional."""

    event_type: str = Field(..., min_length=1)
    event_action: str = ""
    success: bool = False
    error_message: Optional[str] = None
    event_data: Optional[Dict[str, Any]] = None

    @field_validator("event_type")
    @classmethod
    def event_type_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("event_type must not be blank")
        return v.strip()


class LogEventResponse(BaseModel):
    success: bool
    message: str


class AuditLogResponse(BaseModel):
    entry_id: Optional[str] = None
    event_type: str
    event_action: str
    success: bool
    actor_id: str
    actor_email: Optional[str] = None
    error_message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RoleChangeRequest(BaseModel):
    role: str


class RoleChangeResponse(BaseModel):
    uid: str
    role: Role


class UserSummaryResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
