"""Laundry order model. Pure business semantics, no store or infrastructure."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class OrderStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    READY_FOR_PICKUP = "Ready for Pickup"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity}


@dataclass(frozen=True)
class Order:
    order_id: str
    customer_id: str
    customer_name: Optional[str]
    items: List[OrderItem] = field(default_factory=list)
    notes: str = ""
    status: str = OrderStatus.PENDING.value
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, order_id: str, data: Dict[str, Any]) -> "Order":
        """Build from a stored document. Items that are not name/quantity pairs are dropped."""
        raw_items = data.get("items")
        items = []
        if isinstance(raw_items, list):
            for raw in raw_items:
                if isinstance(raw, dict) and raw.get("name"):
                    try:
                        items.append(OrderItem(name=str(raw["name"]), quantity=int(raw.get("quantity", 0))))
                    except (TypeError, ValueError):
                        continue
        created_at = data.get("created_at")
        return cls(
            order_id=order_id,
            customer_id=str(data.get("customer_id", "")),
            customer_name=data.get("customer_name"),
            items=items,
            notes=data.get("notes") or "",
            status=str(data.get("status", OrderStatus.PENDING.value)),
            created_at=created_at if isinstance(created_at, datetime) else None,
        )


def sort_newest_first(orders: List[Order]) -> List[Order]:
    """Order by creation time, newest first; orders without a timestamp go last."""
    return sorted(orders, key=lambda o: o.created_at or _EPOCH, reverse=True)


def matches_search(order: Order, query: str) -> bool:
    """Case-insensitive substring match on customer name or status."""
    q = query.strip().lower()
    if not q:
        return True
    return q in (order.customer_name or "").lower() or q in order.status.lower()
