import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from groupchat.core.exceptions import InternalError
from groupchat.core.ids import new_id, normalize_id
from groupchat.modules.messages.schemas import Attachment, MessageResponse

logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = "id, seq, group_id, sender_id, sender_name, text, file_url, file_type, created_at"


class MonotonicClock:
    """Wall-clock UTC timestamps that never go backwards within this process."""

    def __init__(self):
        self._lock = threading.Lock()
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        with self._lock:
            current = datetime.now(timezone.utc)
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
            return current

    def reset(self, last: Optional[datetime] = None) -> None:
        with self._lock:
            self._last = last


message_clock = MonotonicClock()


class MessageStore:
    def __init__(self, supabase: Client, clock: MonotonicClock = message_clock):
        self.supabase = supabase
        self.clock = clock

    def create_message(
        self,
        group_id: str,
        sender_id: str,
        sender_name: str,
        text: Optional[str] = None,
        attachment: Optional[Attachment] = None,
    ) -> MessageResponse:
        row = {
            "id": new_id(),
            "group_id": group_id,
            "sender_id": sender_id,
            "sender_name": sender_name,
            "text": text,
            "file_url": attachment.url if attachment else None,
            "file_type": attachment.type if attachment else None,
            "created_at": self.clock.now().isoformat(timespec="microseconds"),
        }
        try:
            result = self.supabase.table("messages").insert(row).execute()
        except Exception:
            logger.exception(f"Error saving message to group {group_id}")
            raise InternalError()
        if not result.data:
            logger.error(f"Message insert for group {group_id} returned no rows")
            raise InternalError()
        return self._to_message(result.data[0])

    def list_group_messages(self, group_id: str) -> List[MessageResponse]:
        """All messages of a group, oldest first; equal timestamps keep insertion order."""
        try:
            result = self.supabase.table("messages")\
                .select(MESSAGE_COLUMNS)\
                .eq("group_id", normalize_id(group_id))\
                .order("created_at")\
                .order("seq")\
                .execute()
        except Exception:
            logger.exception(f"Error fetching messages for group {group_id}")
            raise InternalError()
        return [self._to_message(row) for row in result.data or []]

    @staticmethod
    def _to_message(row: Dict[str, Any]) -> MessageResponse:
        attachment = None
        if row.get("file_url") and row.get("file_type"):
            attachment = Attachment(url=row["file_url"], type=row["file_type"])
        return MessageResponse(
            id=normalize_id(row["id"]),
            group_id=normalize_id(row["group_id"]),
            sender=normalize_id(row["sender_id"]),
            sender_name=row["sender_name"],
            text=row.get("text"),
            file=attachment,
            timestamp=row["created_at"],
        )
