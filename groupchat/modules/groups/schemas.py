from pydantic import Field
from typing import List
from datetime import datetime

from groupchat.core.schemas import CamelModel


class GroupCreate(CamelModel):
    name: str
    admin: str
    is_public: bool = False


class GroupJoin(CamelModel):
    group_id: str
    user_id: str


class GroupMemberAdd(CamelModel):
    admin_id: str
    user_id: str


class GroupMemberRemove(CamelModel):
    admin_id: str


class GroupResponse(CamelModel):
    id: str
    name: str
    admin: str
    is_public: bool
    members: List[str] = Field(default_factory=list)
    created_at: datetime


class JoinGroupResponse(CamelModel):
    message: str
