"""In-process publish/subscribe relay: group id -> live WebSocket connections.

One instance per process, created at startup and closed at shutdown. There is
no cross-process fan-out, no replay on subscribe and no delivery acknowledgement.
"""
import asyncio
import logging
from typing import Any, Dict, Protocol, Set

from groupchat.modules.realtime.schemas import ServerFrame

logger = logging.getLogger(__name__)

GROUP_MESSAGE_EVENT = "group-message"


class Connection(Protocol):
    async def send_json(self, data: Any) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class RealtimeRelay:
    def __init__(self, send_timeout: float = 5.0):
        self.send_timeout = send_timeout
        self._lock = asyncio.Lock()
        self._listeners: Dict[str, Set[Connection]] = {}
        self._subscriptions: Dict[Connection, Set[str]] = {}

    async def connect(self, connection: Connection) -> None:
        async with self._lock:
            self._subscriptions.setdefault(connection, set())
        logger.debug(f"Connection {id(connection)} registered")

    async def subscribe(self, connection: Connection, group_id: str) -> None:
        async with self._lock:
            self._listeners.setdefault(group_id, set()).add(connection)
            self._subscriptions.setdefault(connection, set()).add(group_id)
        logger.info(f"Connection {id(connection)} joined group {group_id}")

    async def unsubscribe(self, connection: Connection, group_id: str) -> None:
        async with self._lock:
            self._discard(connection, group_id)
            groups = self._subscriptions.get(connection)
            if groups is not None:
                groups.discard(group_id)
        logger.info(f"Connection {id(connection)} left group {group_id}")

    async def disconnect(self, connection: Connection) -> None:
        async with self._lock:
            groups = self._subscriptions.pop(connection, set())
            for group_id in groups:
                self._discard(connection, group_id)
        logger.info(f"Connection {id(connection)} disconnected ({len(groups)} subscriptions dropped)")

    async def broadcast(self, group_id: str, message: Any, event: str = GROUP_MESSAGE_EVENT) -> int:
        """Best-effort delivery to current subscribers. Returns how many sends succeeded."""
        async with self._lock:
            targets = list(self._listeners.get(group_id, ()))
        if not targets:
            return 0

        frame = ServerFrame(event=event, data=message).model_dump()
        results = await asyncio.gather(
            *(self._send(conn, frame) for conn in targets),
            return_exceptions=True,
        )
        delivered = 0
        for conn, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.warning(f"Delivery to connection {id(conn)} in group {group_id} failed: {result!r}")
            else:
                delivered += 1
        logger.debug(f"Broadcast {event} to {delivered}/{len(targets)} connections in group {group_id}")
        return delivered

    async def subscribers(self, group_id: str) -> Set[Connection]:
        async with self._lock:
            return set(self._listeners.get(group_id, ()))

    async def groups_for(self, connection: Connection) -> Set[str]:
        async with self._lock:
            return set(self._subscriptions.get(connection, ()))

    async def close(self) -> None:
        async with self._lock:
            connections = list(self._subscriptions)
            self._listeners.clear()
            self._subscriptions.clear()
        for conn in connections:
            try:
                await conn.close(code=1001)
            except Exception as e:
                logger.debug(f"Closing connection {id(conn)} failed: {e}")
        logger.info(f"Realtime relay closed ({len(connections)} connections)")

    async def _send(self, connection: Connection, frame: Dict[str, Any]) -> None:
        try:
            await asyncio.wait_for(connection.send_json(frame), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"send not completed within {self.send_timeout}s")

    def _discard(self, connection: Connection, group_id: str) -> None:
        listeners = self._listeners.get(group_id)
        if listeners is None:
            return
        listeners.discard(connection)
        if not listeners:
            del self._listeners[group_id]
