"""Pydantic schemas for account, session and password endpoints. Domain rules are checked by validators, not here."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from laundry_app.domain.models.user import Role, UserProfile


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    email: str
    password: str
    display_name: str = ""
    security_question: str = ""
    security_answer: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class DisplayNameUpdateRequest(BaseModel):
    display_name: str


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class SecurityQuestionResponse(BaseModel):
    question: str


class LoginAttemptResponse(BaseModel):
    timestamp: datetime
    success: bool


class ProfileResponse(BaseModel):
    uid: str
    email: str
    display_name: Optional[str] = None
    role: Optional[Role] = None
    created_at: Optional[datetime] = None
    last_password_change: Optional[datetime] = None
    last_login_attempt: Optional[LoginAttemptResponse] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileResponse":
        attempt = profile.last_login_attempt
        return cls(
            uid=profile.uid,
            email=profile.email,
            display_name=profile.display_name,
            role=profile.role,
            created_at=profile.created_at,
            last_password_change=profile.last_password_change,
            last_login_attempt=(
                LoginAttemptResponse(timestamp=attempt.timestamp, success=attempt.success)
                if attempt
                else None
            ),
        )


class SessionResponse(BaseModel):
    """Issued on signup and login. token is the bearer credential for later requests."""

    token: str = Field(..., description="Bearer token")
    profile: ProfileResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PasswordChangeResponse(MessageResponse):
    token: str = Field(..., description="Replacement bearer token")
