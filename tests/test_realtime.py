import asyncio
from types import SimpleNamespace

import pytest

from cafe_pos.realtime import RealtimeHub, get_hub


class FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


def test_broadcast_reaches_every_client_and_drops_broken_ones() -> None:
    hub = RealtimeHub()
    healthy, broken = FakeSocket(), FakeSocket(fail=True)

    async def scenario():
        await hub.connect(healthy)
        await hub.connect(broken)
        await hub.broadcast("order:created", {"id": "o1"})

    asyncio.run(scenario())
    assert healthy.accepted
    assert healthy.sent == [{"event": "order:created", "data": {"id": "o1"}}]
    assert hub.connection_count == 1


def test_disconnect_stops_delivery() -> None:
    hub = RealtimeHub()
    socket = FakeSocket()

    async def scenario():
        await hub.connect(socket)
        hub.disconnect(socket)
        await hub.broadcast("table:updated", {})

    asyncio.run(scenario())
    assert socket.sent == []
    assert hub.connection_count == 0


def test_get_hub_fails_fast_when_app_has_none() -> None:
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
    with pytest.raises(RuntimeError):
        get_hub(request)


def test_table_status_change_is_pushed_to_websocket(client, auth_headers, pos) -> None:
    table_id = pos["table_ids"][0]
    with client.websocket_connect("/ws") as websocket:
        resp = client.patch(f"/api/tables/{table_id}/status", json={"status": "RESERVED"}, headers=auth_headers)
        assert resp.status_code == 200
        message = websocket.receive_json()
    assert message["event"] == "table:updated"
    assert message["data"]["id"] == table_id
    assert message["data"]["status"] == "RESERVED"


def test_payment_pushes_completion_then_table_release(client, auth_headers, pos) -> None:
    order_id = client.post(
        "/api/orders",
        json={
            "session_id": pos["session_id"],
            "order_type": "DINE_IN",
            "table_id": pos["table_ids"][1],
            "items": [{"product_id": pos["cappuccino_id"], "quantity": 1}],
        },
        headers=auth_headers,
    ).json()["data"]["id"]

    with client.websocket_connect("/ws") as websocket:
        client.post(
            "/api/payments", json={"order_id": order_id, "amount": "3.50", "method": "UPI"}, headers=auth_headers
        )
        events = [websocket.receive_json()["event"], websocket.receive_json()["event"]]
    assert events == ["payment:completed", "table:updated"]


class HandshakingSocket(FakeSocket):
    """Socket whose handshake yields to a broadcast from another task."""

    def __init__(self, hub: RealtimeHub) -> None:
        super().__init__()
        self.hub = hub

    async def accept(self) -> None:
        await self.hub.broadcast("order:created", {"id": "during-handshake"})
        self.accepted = True

    async def send_json(self, message) -> None:
        if not self.accepted:
            raise RuntimeError("cannot send before the handshake completes")
        await super().send_json(message)


def test_broadcast_during_handshake_keeps_the_new_client() -> None:
    hub = RealtimeHub()
    socket = HandshakingSocket(hub)

    async def scenario():
        await hub.connect(socket)
        await hub.broadcast("order:updated", {"id": "after-handshake"})

    asyncio.run(scenario())
    assert hub.connection_count == 1
    assert socket.sent == [{"event": "order:updated", "data": {"id": "after-handshake"}}]
