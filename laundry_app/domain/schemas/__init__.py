"""Domain schemas. Request/response and validation."""

from laundry_app.domain.schemas.account import (
    DisplayNameUpdateRequest,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    PasswordChangeResponse,
    ProfileResponse,
    SecurityQuestionResponse,
    SessionResponse,
    SignupRequest,
)
from laundry_app.domain.schemas.audit import (
    AuditLogResponse,
    LogEventRequest,
    LogEventResponse,
    RoleChangeRequest,
    RoleChangeResponse,
    UserSummaryResponse,
)
from laundry_app.domain.schemas.order import (
    OrderCreateRequest,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdateRequest,
)
from laundry_app.domain.schemas.recovery import (
    RecoveryAnswerRequest,
    RecoveryResponse,
    RecoveryStartRequest,
)

__all__ = [
    "AuditLogResponse",
    "DisplayNameUpdateRequest",
    "LogEventRequest",
    "LogEventResponse",
    "LoginRequest",
    "MessageResponse",
    "OrderCreateRequest",
    "OrderCreatedResponse",
    "OrderResponse",
    "OrderStatusResponse",
    "OrderStatusUpdateRequest",
    "PasswordChangeRequest",
    "PasswordChangeResponse",
    "ProfileResponse",
    "RecoveryAnswerRequest",
    "RecoveryResponse",
    "RecoveryStartRequest",
    "RoleChangeRequest",
    "RoleChangeResponse",
    "SecurityQuestionResponse",
    "SessionResponse",
    "SignupRequest",
    "UserSummaryResponse",
]
