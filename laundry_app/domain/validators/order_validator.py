"""Validators for order rules. Pure functions, no infrastructure or store access."""

from typing import Any, Iterable, List

from laundry_app.domain.exceptions import DomainValidationError, InvalidOrderError
from laundry_app.domain.models.order import OrderItem, OrderStatus

MISSING_ITEM_FIELDS_MESSAGE = "Please fill in all item fields."


def validate_order_items(items: Iterable[Any]) -> List[OrderItem]:
    """
    Every item needs a non-blank name and a quantity of at least 1.
    Returns trimmed OrderItems. Raises InvalidOrderError otherwise.
    """
    validated = []
    for item in items or []:
        name = getattr(item, "name", None)
        quantity = getattr(item, "quantity", None)
        if not name or not str(name).strip() or not quantity or int(quantity) < 1:
            raise InvalidOrderError(MISSING_ITEM_FIELDS_MESSAGE)
        validated.append(OrderItem(name=str(name).strip(), quantity=int(quantity)))
    if not validated:
        raise InvalidOrderError(MISSING_ITEM_FIELDS_MESSAGE)
    return validated


def validate_order_status(value: str) -> OrderStatus:
    """Raises DomainValidationError if value is not a known order status."""
    try:
        return OrderStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise DomainValidationError(f"Unknown order status '{value}'. Allowed: {allowed}") from e
