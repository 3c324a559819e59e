"""Unit tests for OrderService and OrderFeed: role gating, visibility, live snapshots."""

import pytest

from laundry_app.application.document_store import ORDERS_COLLECTION
from laundry_app.application.exceptions import ResourceNotFoundError
from laundry_app.application.identity_provider import Identity
from laundry_app.application.order_service import OrderFeed, OrderService
from laundry_app.application.session import CurrentUser, merge_user_profile
from laundry_app.domain.exceptions import DomainValidationError, InvalidOrderError
from laundry_app.domain.models.order import OrderItem, OrderStatus
from laundry_app.security.exceptions import AuthorizationError
from laundry_app.security.rbac import RBACService


def _user(uid: str, name: str, role) -> CurrentUser:
    identity = Identity(uid=uid, email=f"{uid}@example.com", id_token=f"token-{uid}")
    record = {"email": identity.email, "full_name": name, "role": role} if role else None
    return CurrentUser(identity=identity, profile=merge_user_profile(identity, record))


@pytest.fixture
def customer():
    return _user("cust-1", "Ann Lee", "Customer")


@pytest.fixture
def other_customer():
    return _user("cust-2", "Bob Ray", "Customer")


@pytest.fixture
def manager():
    return _user("mgr-1", "Meg", "Manager")


@pytest.fixture
def service(document_store, audit_logger):
    return OrderService(document_store, audit_logger, RBACService())


async def test_customer_places_pending_order(service, document_store, customer):
    order_id = await service.place_order(customer, [OrderItem("Shirt", 2)], "  starch  ")
    document = await document_store.get(ORDERS_COLLECTION, order_id)
    assert document.data["status"] == "Pending"
    assert document.data["customer_id"] == "cust-1"
    assert document.data["customer_name"] == "Ann Lee"
    assert document.data["notes"] == "starch"
    assert document.data["created_at"] is not None


async def test_blank_item_rejected(service, customer):
    with pytest.raises(InvalidOrderError):
        await service.place_order(customer, [OrderItem(" ", 1)])


async def test_manager_cannot_place_order_and_denial_is_audited(service, manager, audit_repository, audit_logger):
    with pytest.raises(AuthorizationError):
        await service.place_order(manager, [OrderItem("Shirt", 1)])
    await audit_logger.drain()
    entry = audit_repository.entries[-1]
    assert entry.event_type == "access_control"
    assert entry.event_action == "access_denied"
    assert entry.details["action"] == "place_order"


async def test_user_without_record_is_denied(service):
    with pytest.raises(AuthorizationError):
        await service.list_orders(_user("ghost", "Ghost", None))


async def test_customers_see_only_their_orders_newest_first(service, customer, other_customer, manager):
    first = await service.place_order(customer, [OrderItem("Shirt", 1)])
    await service.place_order(other_customer, [OrderItem("Coat", 1)])
    second = await service.place_order(customer, [OrderItem("Towel", 4)])

    own = await service.list_orders(customer)
    assert [o.order_id for o in own] == [second, first]

    everything = await service.list_orders(manager)
    assert len(everything) == 3


async def test_manager_search(service, customer, other_customer, manager):
    await service.place_order(customer, [OrderItem("Shirt", 1)])
    await service.place_order(other_customer, [OrderItem("Coat", 1)])
    found = await service.list_orders(manager, search="bob")
    assert [o.customer_name for o in found] == ["Bob Ray"]


async def test_update_status(service, customer, manager, document_store):
    order_id = await service.place_order(customer, [OrderItem("Shirt", 1)])
    assert await service.update_status(manager, order_id, "Ready for Pickup") is OrderStatus.READY_FOR_PICKUP
    document = await document_store.get(ORDERS_COLLECTION, order_id)
    assert document.data["status"] == "Ready for Pickup"

    with pytest.raises(DomainValidationError):
        await service.update_status(manager, order_id, "Lost")
    with pytest.raises(ResourceNotFoundError):
        await service.update_status(manager, "missing", "Completed")
    with pytest.raises(AuthorizationError):
        await service.update_status(customer, order_id, "Completed")


async def test_feed_receives_initial_and_updated_snapshots(service, customer, other_customer):
    await service.place_order(customer, [OrderItem("Shirt", 1)])
    feed = await service.open_feed(customer)
    initial = await feed.next_snapshot()
    assert len(initial) == 1

    await service.place_order(other_customer, [OrderItem("Coat", 1)])
    await service.place_order(customer, [OrderItem("Towel", 2)])
    latest = await feed.next_snapshot()
    assert [o.items[0].name for o in latest] == ["Towel", "Shirt"]
    feed.close()


async def test_closed_feed_ignores_snapshots(service, customer):
    feed = await service.open_feed(customer)
    await feed.next_snapshot()
    feed.close()
    await service.place_order(customer, [OrderItem("Shirt", 1)])
    assert feed.orders == []
    assert feed.closed


async def test_feed_as_context_manager_unsubscribes():
    class _Subscription:
        unsubscribed = 0

        def unsubscribe(self):
            self.unsubscribed += 1

    subscription = _Subscription()
    async with OrderFeed() as feed:
        feed.attach(subscription)
    assert subscription.unsubscribed == 1
