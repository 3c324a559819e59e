"""Validators for account and credential rules. Pure functions, no infrastructure or store access."""

import re
from typing import Optional

from laundry_app.domain.exceptions import DomainValidationError
from laundry_app.domain.models.credential import is_known_question

# At least one lowercase, one uppercase, one digit; 8 or more characters.
PASSWORD_STRENGTH_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$")

WEAK_PASSWORD_MESSAGE = (
    "Password must contain at least one number, one uppercase and lowercase letter, "
    "and be at least 8 characters long."
)


def normalize_email(email: Optional[str]) -> str:
    """Trim and lowercase. Used both as the stored value and as a lookup key."""
    return (email or "").strip().lower()


def validate_email(email: Optional[str]) -> str:
    """Return the normalized email. Raises DomainValidationError if empty or without '@'."""
    normalized = normalize_email(email)
    if not normalized:
        raise DomainValidationError("Please enter your email address.")
    if "@" not in normalized:
        raise DomainValidationError("Please enter a valid email address.")
    return normalized


def is_strong_password(password: Optional[str]) -> bool:
    return bool(password) and PASSWORD_STRENGTH_PATTERN.match(password) is not None


def validate_password_strength(password: Optional[str]) -> None:
    """Raises DomainValidationError if the password fails the strength pattern."""
    if not is_strong_password(password):
        raise DomainValidationError(WEAK_PASSWORD_MESSAGE)


def validate_signup(
    *,
    display_name: Optional[str],
    password: Optional[str],
    security_question: Optional[str],
    security_answer: Optional[str],
) -> None:
    """
    Local signup checks, short-circuit on first failure. Runs before any backend call.
    Raises DomainValidationError on violation.
    """
    if not display_name or not display_name.strip():
        raise DomainValidationError("Please enter your full name.")
    if not security_question or not is_known_question(security_question):
        raise DomainValidationError("Please choose one of the offered security questions.")
    if not security_answer or not security_answer.strip():
        raise DomainValidationError("Please answer the security question.")
    validate_password_strength(password)
