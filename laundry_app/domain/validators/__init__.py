"""Domain validators. Pure validation functions."""

from laundry_app.domain.validators.account_validator import (
    PASSWORD_STRENGTH_PATTERN,
    WEAK_PASSWORD_MESSAGE,
    is_strong_password,
    normalize_email,
    validate_email,
    validate_password_strength,
    validate_signup,
)
from laundry_app.domain.validators.order_validator import (
    validate_order_items,
    validate_order_status,
)

__all__ = [
    "PASSWORD_STRENGTH_PATTERN",
    "WEAK_PASSWORD_MESSAGE",
    "is_strong_password",
    "normalize_email",
    "validate_email",
    "validate_password_strength",
    "validate_signup",
    "validate_order_items",
    "validate_order_status",
]
