"""
Core dependencies: stores, services and the process-wide realtime relay
"""

from fastapi import Depends, Request
from groupchat.config import settings
from groupchat.core.exceptions import InternalError
from groupchat.database.supabase_client import get_supabase
from groupchat.modules.groups.service import MembershipService
from groupchat.modules.groups.store import GroupStore
from groupchat.modules.messages.service import MessageService
from groupchat.modules.messages.store import MessageStore
from groupchat.modules.realtime.relay import RealtimeRelay
from groupchat.modules.uploads.s3_storage import S3Storage
from groupchat.modules.users.service import UserService
from supabase import Client
import logging

logger = logging.getLogger(__name__)


def get_relay(request: Request) -> RealtimeRelay:
    """The relay is owned by the application (created on startup), never a module global."""
    return request.app.state.relay


def get_group_store(supabase: Client = Depends(get_supabase)) -> GroupStore:
    return GroupStore(supabase)


def get_message_store(supabase: Client = Depends(get_supabase)) -> MessageStore:
    return MessageStore(supabase)


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def get_membership_service(
    store: GroupStore = Depends(get_group_store),
    users: UserService = Depends(get_user_service)
) -> MembershipService:
    return MembershipService(
        store,
        users,
        members_list_requires_membership=settings.members_list_requires_membership,
    )


def get_message_service(
    membership: MembershipService = Depends(get_membership_service),
    store: MessageStore = Depends(get_message_store),
    relay: RealtimeRelay = Depends(get_relay)
) -> MessageService:
    return MessageService(membership, store, relay)


def get_s3_storage() -> S3Storage:
    try:
        return S3Storage()
    except ValueError as e:
        logger.error(f"Upload signing unavailable: {e}")
        raise InternalError()
