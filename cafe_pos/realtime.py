"""Live order/table updates pushed to connected POS screens.

Messages are JSON objects of the form ``{"event": name, "data": payload}``.
Delivery is best effort: a socket that fails to receive is dropped.
"""

import logging
from typing import Any

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

TABLE_UPDATED = "table:updated"
ORDER_CREATED = "order:created"
ORDER_UPDATED = "order:updated"
ORDER_SENT = "order:sent"
PAYMENT_COMPLETED = "payment:completed"
SESSION_OPENED = "session:opened"
SESSION_CLOSED = "session:closed"


class RealtimeHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        # Sockets still handshaking cannot be sent to, so register after accept.
        await websocket.accept()
        self._connections.add(websocket)
        logger.info("realtime client connected (%d active)", len(self._connections))

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info("realtime client disconnected (%d active)", len(self._connections))

    async def broadcast(self, event: str, data: Any) -> None:
        message = {"event": event, "data": data}
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
            except Exception:
                logger.warning("dropping realtime client after failed send of %s", event, exc_info=True)
                self._connections.discard(websocket)


def get_hub(request: Request) -> RealtimeHub:
    hub = getattr(request.app.state, "hub", None)
    if hub is None:
        raise RuntimeError("realtime hub not initialized; build the app with create_app()")
    return hub


router = APIRouter()


@router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket) -> None:
    hub = getattr(websocket.app.state, "hub", None)
    if hub is None:
        raise RuntimeError("realtime hub not initialized; build the app with create_app()")
    await hub.connect(websocket)
    try:
        while True:
            # Clients only listen; anything they send is ignored.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)
