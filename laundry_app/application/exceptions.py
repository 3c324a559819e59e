"""Application-layer exceptions. Do not reuse domain exceptions."""

from typing import Optional

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred. Please try again."


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotAuthenticatedError(ApplicationError):
    """Raised when a request carries no valid session token."""


class AuthenticationFailedError(ApplicationError):
    """Raised when sign-in is rejected. message is the generic user-facing text; code is the provider code."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class IdentityRejectedError(ApplicationError):
    """Raised when the identity provider rejects an account operation (e.g. signup)."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class ResourceNotFoundError(ApplicationError):
    """Raised when a requested record does not exist."""


class AccountNotFoundError(ResourceNotFoundError):
    """Raised when no security credential record exists for an email."""


class RecoverySessionNotFoundError(ResourceNotFoundError):
    """Raised when a recovery id is unknown or its session expired."""


class IncorrectAnswerError(ApplicationError):
    """Raised when a security answer does not match the stored digest."""


class InvalidRecoveryStateError(ApplicationError):
    """Raised when a recovery step is submitted in the wrong state."""


class BackendUnavailableError(ApplicationError):
    """Raised when the document store or identity provider fails. message is always generic."""

    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message)
