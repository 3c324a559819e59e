"""Orders API router: place, list, status updates and the /orders/live WebSocket feed."""

import asyncio
import contextlib
import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from laundry_app.api.dependencies import get_account_service, get_current_user, get_order_service
from laundry_app.application.account_service import AccountService
from laundry_app.application.exceptions import ApplicationError
from laundry_app.application.order_service import OrderFeed, OrderService
from laundry_app.application.session import CurrentUser
from laundry_app.domain.models.order import Order
from laundry_app.domain.schemas.order import (
    OrderCreateRequest,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderStatusUpdateRequest,
)
from laundry_app.security.exceptions import SecurityError

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize(orders: List[Order]) -> list:
    return [OrderResponse.from_order(o).model_dump(mode="json") for o in orders]


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    body: OrderCreateRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    order_service: Annotated[OrderService, Depends(get_order_service)],
):
    order_id = await order_service.place_order(user, body.items, body.notes)
    return OrderCreatedResponse(order_id=order_id)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    order_service: Annotated[OrderService, Depends(get_order_service)],
    search: Annotated[Optional[str], Query(max_length=200)] = None,
):
    """Customers get their own orders; staff get all, optionally filtered by search."""
    orders = await order_service.list_orders(user, search)
    return [OrderResponse.from_order(o) for o in orders]


@router.patch("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdateRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    order_service: Annotated[OrderService, Depends(get_order_service)],
):
    new_status = await order_service.update_status(user, order_id, body.status)
    return OrderStatusResponse(order_id=order_id, status=new_status.value)


async def _push_snapshots(websocket: WebSocket, feed: OrderFeed) -> None:
    while True:
        orders = await feed.next_snapshot()
        await websocket.send_json(_serialize(orders))


async def _stop_pusher(pusher: asyncio.Task) -> None:
    """Cancel the pusher and collect its outcome; a send on a closing socket may have failed it."""
    pusher.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        try:
            await pusher
        except Exception as e:
            logger.info("order_feed_push_failed", extra={"error": str(e)})


@router.websocket("/live")
async def live_orders(
    websocket: WebSocket,
    account_service: Annotated[AccountService, Depends(get_account_service)],
    order_service: Annotated[OrderService, Depends(get_order_service)],
    token: Optional[str] = None,
):
    """
    Sends the full visible order list on connect and after every change.
    Token comes from ?token= or the Authorization header. The subscription
    is released when the client disconnects.
    """
    if token is None:
        header = websocket.headers.get("authorization", "")
        scheme, _, credentials = header.partition(" ")
        token = credentials.strip() if scheme.lower() == "bearer" else None
    try:
        user = await account_service.resolve_token(token)
        feed = await order_service.open_feed(user)
    except (ApplicationError, SecurityError) as e:
        logger.info("order_feed_rejected", extra={"error": e.message})
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    async with feed:
        pusher = asyncio.create_task(_push_snapshots(websocket, feed))
        try:
            while True:
                # Clients may send pings to keep the socket alive.
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            logger.info("order_feed_disconnected", extra={"uid": user.uid})
        finally:
            await _stop_pusher(pusher)
