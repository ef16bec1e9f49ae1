from fastapi import APIRouter, Depends, Query
from groupchat.core.dependencies import get_message_service
from groupchat.modules.messages.schemas import MessageCreate, MessageResponse
from groupchat.modules.messages.service import MessageService
from typing import List, Optional

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    message_data: MessageCreate,
    service: MessageService = Depends(get_message_service)
):
    """Post a text and/or file message; subscribers of the group receive it as a group-message event"""
    return await service.send_message(
        message_data.group_id,
        message_data.sender,
        message_data.sender_name,
        text=message_data.text,
        attachment=message_data.file,
    )


@router.get("/{group_id}", response_model=List[MessageResponse])
def get_group_messages(
    group_id: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: MessageService = Depends(get_message_service)
):
    """Message history, oldest first. Private groups require a member userId."""
    return service.get_group_messages(group_id, user_id)
