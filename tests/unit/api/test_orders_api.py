"""API tests for /orders, including the /orders/live WebSocket feed."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from laundry_app.api.routers.orders import _stop_pusher
from laundry_app.domain.models.credential import SECURITY_QUESTIONS


async def test_customer_places_and_lists_orders(async_client, sign_up, auth_headers):
    token, uid = await sign_up("ann@example.com")
    r = await async_client.post(
        "/orders",
        json={"items": [{"name": "Shirt", "quantity": 2}], "notes": "no starch"},
        headers=auth_headers(token),
    )
    assert r.status_code == 201
    order_id = r.json()["order_id"]

    listed = await async_client.get("/orders", headers=auth_headers(token))
    assert listed.status_code == 200
    orders = listed.json()
    assert [o["order_id"] for o in orders] == [order_id]
    assert orders[0]["status"] == "Pending"
    assert orders[0]["customer_id"] == uid


async def test_blank_item_is_422(async_client, sign_up, auth_headers):
    token, _ = await sign_up("ann@example.com")
    r = await async_client.post("/orders", json={"items": [{"name": "", "quantity": 1}]}, headers=auth_headers(token))
    assert r.status_code == 422
    assert r.json()["detail"] == "Please fill in all item fields."


async def test_status_update_requires_staff(async_client, sign_up, auth_headers, audit_repository, drain_audit):
    customer, _ = await sign_up("ann@example.com")
    manager, _ = await sign_up("meg@example.com", name="Meg", role="Manager")
    order_id = (
        await async_client.post("/orders", json={"items": [{"name": "Coat", "quantity": 1}]}, headers=auth_headers(customer))
    ).json()["order_id"]

    denied = await async_client.patch(
        f"/orders/{order_id}/status", json={"status": "Completed"}, headers=auth_headers(customer)
    )
    assert denied.status_code == 403
    await drain_audit()
    assert audit_repository.entries[-1].event_action == "access_denied"

    r = await async_client.patch(f"/orders/{order_id}/status", json={"status": "In Progress"}, headers=auth_headers(manager))
    assert r.status_code == 200
    assert r.json() == {"order_id": order_id, "status": "In Progress"}

    missing = await async_client.patch("/orders/nope/status", json={"status": "Completed"}, headers=auth_headers(manager))
    assert missing.status_code == 404


async def test_manager_sees_all_and_can_search(async_client, sign_up, auth_headers):
    ann, _ = await sign_up("ann@example.com", name="Ann Lee")
    bob, _ = await sign_up("bob@example.com", name="Bob Ray")
    manager, _ = await sign_up("meg@example.com", name="Meg", role="Manager")
    for token in (ann, bob):
        await async_client.post("/orders", json={"items": [{"name": "Shirt", "quantity": 1}]}, headers=auth_headers(token))

    everything = await async_client.get("/orders", headers=auth_headers(manager))
    assert len(everything.json()) == 2
    found = await async_client.get("/orders", params={"search": "BOB"}, headers=auth_headers(manager))
    assert [o["customer_name"] for o in found.json()] == ["Bob Ray"]


def _signup_sync(client: TestClient, email: str) -> str:
    r = client.post(
        "/auth/signup",
        json={
            "email": email,
            "password": "Passw0rdOk",
            "display_name": "Ann Lee",
            "security_question": SECURITY_QUESTIONS[0],
            "security_answer": "x",
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["token"]


def test_live_feed_pushes_snapshots(app_with_overrides):
    with TestClient(app_with_overrides) as client:
        token = _signup_sync(client, "ann@example.com")
        headers = {"Authorization": f"Bearer {token}"}
        client.post("/orders", json={"items": [{"name": "Shirt", "quantity": 1}]}, headers=headers)

        with client.websocket_connect(f"/orders/live?token={token}") as ws:
            first = ws.receive_json()
            assert [o["items"][0]["name"] for o in first] == ["Shirt"]

            ws.send_text("ping")
            assert ws.receive_text() == "pong"

            client.post("/orders", json={"items": [{"name": "Towel", "quantity": 3}]}, headers=headers)
            second = ws.receive_json()
            assert [o["items"][0]["name"] for o in second] == ["Towel", "Shirt"]


def test_live_feed_rejects_missing_token(app_with_overrides):
    with TestClient(app_with_overrides) as client:
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/orders/live") as ws:
                ws.receive_json()


async def test_stop_pusher_collects_failed_send():
    async def failing_push():
        raise RuntimeError("socket closing")

    pusher = asyncio.create_task(failing_push())
    await asyncio.sleep(0)
    assert pusher.done()
    await _stop_pusher(pusher)
    assert isinstance(pusher.exception(), RuntimeError)


async def test_stop_pusher_cancels_running_task():
    pusher = asyncio.create_task(asyncio.sleep(60))
    await _stop_pusher(pusher)
    assert pusher.cancelled()
