import logging
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from groupchat.core.exceptions import ForbiddenError, InvalidError
from groupchat.core.ids import normalize_id
from groupchat.modules.groups.service import MembershipService
from groupchat.modules.messages.schemas import Attachment, MessageResponse
from groupchat.modules.messages.store import MessageStore
from groupchat.modules.realtime.relay import RealtimeRelay

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, membership: MembershipService, store: MessageStore, relay: RealtimeRelay):
        self.membership = membership
        self.store = store
        self.relay = relay

    async def send_message(
        self,
        group_id: str,
        sender_id: str,
        sender_name: str,
        text: Optional[str] = None,
        attachment: Optional[Attachment] = None,
    ) -> MessageResponse:
        """Validate, persist, then fan out. The persisted message is returned even if fan-out fails.

        Store calls run in the threadpool so the event loop keeps serving sockets meanwhile.
        """
        group = await run_in_threadpool(self.membership.get_group, group_id)
        sender_id = normalize_id(sender_id)
        if not self.membership.is_member(group, sender_id):
            raise ForbiddenError("You must join the group to send messages")

        text = (text or "").strip() or None
        if attachment is not None and not attachment.url.strip():
            attachment = None
        if text is None and attachment is None:
            raise InvalidError("Either text or file must be provided")
        sender_name = (sender_name or "").strip()
        if not sender_name:
            raise InvalidError("Sender name is required")

        message = await run_in_threadpool(
            self.store.create_message,
            group.id,
            sender_id,
            sender_name,
            text=text,
            attachment=attachment,
        )

        try:
            await self.relay.broadcast(group.id, message.model_dump(mode="json", by_alias=True))
        except Exception:
            logger.exception(f"Broadcast of message {message.id} to group {group.id} failed")
        return message

    def get_group_messages(self, group_id: str, requester_id: Optional[str] = None) -> List[MessageResponse]:
        group = self.membership.get_group(group_id)
        if not group.is_public and not self.membership.is_member(group, requester_id):
            raise ForbiddenError("Unauthorized to view messages")
        return self.store.list_group_messages(group.id)
