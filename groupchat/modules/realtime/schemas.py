from pydantic import BaseModel
from typing import Any

JOIN_GROUP_EVENT = "join-group"
LEAVE_GROUP_EVENT = "leave-group"
ERROR_EVENT = "error"


class ClientFrame(BaseModel):
    """Client -> server: {"event": "join-group" | "leave-group", "data": "<groupId>"}"""

    event: str
    data: Any = None


class ServerFrame(BaseModel):
    """Server -> client: {"event": "group-message" | "error", "data": ...}"""

    event: str
    data: Any = None
