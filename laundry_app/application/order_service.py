"""Order application service and the live order feed."""

import asyncio
import logging
from typing import Any, Iterable, List, Optional

from laundry_app.application.authorization import authorize
from laundry_app.application.document_store import (
    ORDERS_COLLECTION,
    SERVER_TIMESTAMP,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    Subscription,
)
from laundry_app.application.exceptions import BackendUnavailableError, ResourceNotFoundError
from laundry_app.application.session import CurrentUser
from laundry_app.audit.logger import AuditLogger
from laundry_app.domain.models.order import Order, OrderStatus, matches_search, sort_newest_first
from laundry_app.domain.validators.order_validator import validate_order_items, validate_order_status
from laundry_app.security import rbac as permissions
from laundry_app.security.rbac import RBACService


class OrderFeed:
    """
    Local view of the orders visible to one user, kept in sync by a store subscription.
    Every snapshot replaces the list and is re-sorted newest first. Only the
    latest unread snapshot is kept for the consumer.
    """

    def __init__(self) -> None:
        self._orders: List[Order] = []
        self._subscription: Optional[Subscription] = None
        self._updates: asyncio.Queue[List[Order]] = asyncio.Queue(maxsize=1)
        self._closed = False

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def closed(self) -> bool:
        return self._closed

    def attach(self, subscription: Subscription) -> None:
        self._subscription = subscription
        if self._closed:
            subscription.unsubscribe()

    def apply_snapshot(self, documents: List[Document]) -> None:
        if self._closed:
            return
        self._orders = sort_newest_first([Order.from_document(d.doc_id, d.data) for d in documents])
        if self._updates.full():
            self._updates.get_nowait()
        self._updates.put_nowait(list(self._orders))

    async def next_snapshot(self) -> List[Order]:
        return await self._updates.get()

    def close(self) -> None:
        """Release the subscription. No snapshot is applied afterwards."""
        self._closed = True
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "OrderFeed":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class OrderService:
    """Customers place and see their own orders; managers see all and move statuses."""

    def __init__(
        self,
        documents: DocumentStore,
        audit: AuditLogger,
        rbac: RBACService,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._documents = documents
        self._audit = audit
        self._rbac = rbac
        self._logger = logger or logging.getLogger(__name__)

    def _sees_all(self, user: CurrentUser) -> bool:
        return self._rbac.has_permission(user.role, permissions.VIEW_ALL_ORDERS)

    async def place_order(self, user: CurrentUser, items: Iterable[Any], notes: str = "") -> str:
        authorize(self._rbac, self._audit, user, permissions.PLACE_ORDER)
        validated = validate_order_items(items)
        try:
            return await self._documents.add(
                ORDERS_COLLECTION,
                {
                    "customer_id": user.uid,
                    "customer_name": user.profile.display_name,
                    "items": [item.to_dict() for item in validated],
                    "notes": (notes or "").strip(),
                    "status": OrderStatus.PENDING.value,
                    "created_at": SERVER_TIMESTAMP,
                },
            )
        except Exception as e:
            self._logger.error("order_create_failed", extra={"uid": user.uid, "error": str(e)})
            raise BackendUnavailableError("Failed to place order. Please try again.") from e

    async def list_orders(self, user: CurrentUser, search: Optional[str] = None) -> List[Order]:
        authorize(self._rbac, self._audit, user, permissions.VIEW_OWN_ORDERS)
        try:
            if self._sees_all(user):
                documents = await self._documents.query(ORDERS_COLLECTION)
            else:
                documents = await self._documents.query(ORDERS_COLLECTION, "customer_id", user.uid)
        except Exception as e:
            self._logger.error("order_list_failed", extra={"uid": user.uid, "error": str(e)})
            raise BackendUnavailableError("Failed to load orders.") from e
        orders = sort_newest_first([Order.from_document(d.doc_id, d.data) for d in documents])
        if search and self._sees_all(user):
            orders = [o for o in orders if matches_search(o, search)]
        return orders

    async def update_status(self, user: CurrentUser, order_id: str, status: str) -> OrderStatus:
        authorize(self._rbac, self._audit, user, permissions.UPDATE_ORDER_STATUS)
        new_status = validate_order_status(status)
        try:
            await self._documents.update(ORDERS_COLLECTION, order_id, {"status": new_status.value})
        except DocumentNotFoundError as e:
            raise ResourceNotFoundError("Order not found") from e
        except Exception as e:
            self._logger.error("order_status_update_failed", extra={"order_id": order_id, "error": str(e)})
            raise BackendUnavailableError("Failed to update order status.") from e
        return new_status

    async def open_feed(self, user: CurrentUser) -> OrderFeed:
        """Subscribe a new OrderFeed to the orders visible to user. Caller must close() it."""
        authorize(self._rbac, self._audit, user, permissions.VIEW_OWN_ORDERS)
        feed = OrderFeed()
        if self._sees_all(user):
            subscription = await self._documents.subscribe(ORDERS_COLLECTION, feed.apply_snapshot)
        else:
            subscription = await self._documents.subscribe(
                ORDERS_COLLECTION, feed.apply_snapshot, "customer_id", user.uid
            )
        feed.attach(subscription)
        return feed
