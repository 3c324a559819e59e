"""Domain models. Pure business entities."""

from laundry_app.domain.models.credential import (
    SECURITY_QUESTIONS,
    SecurityCredentialRecord,
    random_security_question,
)
from laundry_app.domain.models.order import Order, OrderItem, OrderStatus
from laundry_app.domain.models.recovery import RecoveryState
from laundry_app.domain.models.user import LoginAttempt, Role, UserProfile

__all__ = [
    "SECURITY_QUESTIONS",
    "SecurityCredentialRecord",
    "random_security_question",
    "Order",
    "OrderItem",
    "OrderStatus",
    "RecoveryState",
    "LoginAttempt",
    "Role",
    "UserProfile",
]
