"""Pydantic schemas for order endpoints and the live feed."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from laundry_app.domain.models.order import Order


class OrderItemPayload(BaseModel):
    name: str = ""
    quantity: int = 1


class OrderCreateRequest(BaseModel):
    items: List[OrderItemPayload] = []
    notes: str = ""


class OrderStatusUpdateRequest(BaseModel):
    status: str


class OrderCreatedResponse(BaseModel):
    order_id: str


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    customer_name: Optional[str] = None
    items: List[OrderItemPayload]
    notes: str = ""
    status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=order.order_id,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            items=[OrderItemPayload(name=i.name, quantity=i.quantity) for i in order.items],
            notes=order.notes,
            status=order.status,
            created_at=order.created_at,
        )


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str
