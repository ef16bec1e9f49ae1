from pydantic import Field
from typing import Literal, Optional
from datetime import datetime

from groupchat.core.schemas import CamelModel

FileType = Literal["image", "video", "document", "audio"]


class Attachment(CamelModel):
    url: str
    type: FileType


class MessageCreate(CamelModel):
    group_id: str
    sender: str
    sender_name: str
    text: Optional[str] = None
    file: Optional[Attachment] = None


class MessageResponse(CamelModel):
    id: str
    group_id: str
    sender: str
    sender_name: str
    text: Optional[str] = None
    file: Optional[Attachment] = None
    timestamp: datetime = Field(description="Server-assigned, non-decreasing within a process")
