from typing import Optional
from datetime import datetime

from groupchat.core.schemas import CamelModel


class UserDetail(CamelModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
