import logging
from supabase import Client
from typing import List, Optional

from groupchat.core.exceptions import InternalError
from groupchat.core.ids import is_uuid, normalize_id, unique_ids
from groupchat.modules.users.schemas import UserDetail

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, full_name, avatar_url, created_at"


class UserService:
    """Read-only view of the identity store."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> Optional[UserDetail]:
        user_id = normalize_id(user_id)
        if not is_uuid(user_id):
            return None
        try:
            result = self.supabase.table("user_profiles")\
                .select(USER_COLUMNS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        except Exception:
            logger.exception(f"Error fetching user {user_id}")
            raise InternalError()

        if not result.data:
            return None
        return UserDetail(**result.data[0])

    def get_users_by_ids(self, user_ids: List[str]) -> List[UserDetail]:
        """Resolve ids to profiles in the order given. Unknown ids are skipped."""
        ids = [i for i in unique_ids(user_ids) if is_uuid(i)]
        if not ids:
            return []
        try:
            result = self.supabase.table("user_profiles")\
                .select(USER_COLUMNS)\
                .in_("id", ids)\
                .execute()
        except Exception:
            logger.exception("Error resolving user profiles")
            raise InternalError()

        by_id = {normalize_id(row["id"]): row for row in result.data or []}
        return [UserDetail(**by_id[i]) for i in ids if i in by_id]

    def get_user_by_email(self, email: str) -> Optional[UserDetail]:
        try:
            result = self.supabase.table("user_profiles")\
                .select(USER_COLUMNS)\
                .eq("email", email.strip())\
                .limit(1)\
                .execute()
        except Exception:
            logger.exception("Error looking up user by email")
            raise InternalError()

        if not result.data:
            return None
        return UserDetail(**result.data[0])
