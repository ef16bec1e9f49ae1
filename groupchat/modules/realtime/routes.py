import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from groupchat.core.ids import normalize_id
from groupchat.modules.realtime.relay import RealtimeRelay
from groupchat.modules.realtime.schemas import (
    ERROR_EVENT, JOIN_GROUP_EVENT, LEAVE_GROUP_EVENT, ClientFrame, ServerFrame
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


class WebSocketConnection:
    """Relay-side handle for one client socket; hashed by identity."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send_json(self, data) -> None:
        await self.websocket.send_json(data)

    async def close(self, code: int = 1000) -> None:
        await self.websocket.close(code=code)


async def _send_error(websocket: WebSocket, detail: str) -> None:
    await websocket.send_json(ServerFrame(event=ERROR_EVENT, data={"detail": detail}).model_dump())


@router.websocket("/ws")
async def realtime_channel(websocket: WebSocket):
    """Subscribe to groups with join-group / leave-group; new messages arrive as group-message"""
    relay: RealtimeRelay = websocket.app.state.relay
    await websocket.accept()
    connection = WebSocketConnection(websocket)
    await relay.connect(connection)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                await _send_error(websocket, "invalid frame")
                continue
            try:
                frame = ClientFrame.model_validate_json(raw)
            except ValidationError:
                await _send_error(websocket, "invalid frame")
                continue

            group_id = normalize_id(frame.data) if isinstance(frame.data, (str, int)) else ""
            if frame.event not in (JOIN_GROUP_EVENT, LEAVE_GROUP_EVENT):
                await _send_error(websocket, f"unknown event {frame.event}")
            elif not group_id:
                await _send_error(websocket, "groupId is required")
            elif frame.event == JOIN_GROUP_EVENT:
                await relay.subscribe(connection, group_id)
            else:
                await relay.unsubscribe(connection, group_id)
    except WebSocketDisconnect:
        logger.debug("Client disconnected")
    finally:
        await relay.disconnect(connection)
