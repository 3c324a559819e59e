"""Domain-specific exceptions. Pure domain layer, no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated (user input errors)."""


class InvalidStatusTransitionError(DomainError):
    """Raised when a recovery or order status transition is not allowed."""


class InvalidOrderError(DomainValidationError):
    """Raised when an order has missing or malformed items."""


class MalformedRecordError(DomainError):
    """Raised when a stored document does not have the expected shape."""
