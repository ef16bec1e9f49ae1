import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from groupchat.core.exceptions import InternalError
from groupchat.core.ids import is_uuid, new_id, normalize_id, unique_ids
from groupchat.modules.groups.schemas import GroupResponse

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
GROUP_COLUMNS = "id, name, admin_id, is_public, created_at"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class GroupStore:
    """Persistence for groups and their membership rows."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_group(self, name: str, admin_id: str, is_public: bool) -> GroupResponse:
        created_at = _now()
        row = {
            "id": new_id(),
            "name": name,
            "admin_id": admin_id,
            "is_public": is_public,
            "created_at": created_at,
        }
        try:
            result = self.supabase.table("groups").insert(row).execute()
        except Exception:
            logger.exception("Error creating group")
            raise InternalError()
        if not result.data:
            logger.error("Group insert returned no rows")
            raise InternalError()

        try:
            self.supabase.table("group_members").insert({
                "id": new_id(),
                "group_id": row["id"],
                "user_id": admin_id,
                "created_at": created_at,
            }).execute()
        except Exception:
            logger.exception(f"Error adding admin to group {row['id']}, rolling back")
            self._delete_group(row["id"])
            raise InternalError()

        return self._to_group(result.data[0], [admin_id])

    def get_group(self, group_id: str) -> Optional[GroupResponse]:
        group_id = normalize_id(group_id)
        if not is_uuid(group_id):
            return None
        try:
            result = self.supabase.table("groups")\
                .select(GROUP_COLUMNS)\
                .eq("id", group_id)\
                .limit(1)\
                .execute()
        except Exception:
            logger.exception(f"Error fetching group {group_id}")
            raise InternalError()

        if not result.data:
            return None
        return self._with_members(result.data)[0]

    def list_public_groups(self) -> List[GroupResponse]:
        try:
            result = self.supabase.table("groups")\
                .select(GROUP_COLUMNS)\
                .eq("is_public", True)\
                .execute()
        except Exception:
            logger.exception("Error listing public groups")
            raise InternalError()
        return self._with_members(result.data or [])

    def list_groups_for_user(self, user_id: str) -> List[GroupResponse]:
        try:
            members_result = self.supabase.table("group_members")\
                .select("group_id")\
                .eq("user_id", normalize_id(user_id))\
                .execute()
            group_ids = unique_ids(m["group_id"] for m in members_result.data or [])
            if not group_ids:
                return []
            result = self.supabase.table("groups")\
                .select(GROUP_COLUMNS)\
                .in_("id", group_ids)\
                .execute()
        except Exception:
            logger.exception(f"Error listing groups for user {user_id}")
            raise InternalError()
        return self._with_members(result.data or [])

    def add_member(self, group_id: str, user_id: str) -> bool:
        """Insert a membership row. Returns False if the user was already a member."""
        try:
            self.supabase.table("group_members").insert({
                "id": new_id(),
                "group_id": group_id,
                "user_id": user_id,
                "created_at": _now(),
            }).execute()
            return True
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                return False
            logger.exception(f"Error adding {user_id} to group {group_id}")
            raise InternalError()
        except Exception:
            logger.exception(f"Error adding {user_id} to group {group_id}")
            raise InternalError()

    def ensure_member(self, group_id: str, user_id: str) -> None:
        """Atomic add-to-set: concurrent callers cannot produce duplicate rows."""
        try:
            self.supabase.table("group_members").upsert(
                {
                    "id": new_id(),
                    "group_id": group_id,
                    "user_id": user_id,
                    "created_at": _now(),
                },
                on_conflict="group_id,user_id",
                ignore_duplicates=True,
            ).execute()
        except Exception:
            logger.exception(f"Error joining {user_id} to group {group_id}")
            raise InternalError()

    def remove_member(self, group_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table("group_members")\
                .delete()\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception:
            logger.exception(f"Error removing {user_id} from group {group_id}")
            raise InternalError()
        return len(result.data or []) > 0

    def _delete_group(self, group_id: str) -> None:
        try:
            self.supabase.table("groups").delete().eq("id", group_id).execute()
        except Exception:
            logger.exception(f"Rollback of group {group_id} failed")

    def _with_members(self, rows: List[Dict[str, Any]]) -> List[GroupResponse]:
        if not rows:
            return []
        group_ids = [normalize_id(r["id"]) for r in rows]
        try:
            result = self.supabase.table("group_members")\
                .select("group_id, user_id")\
                .in_("group_id", group_ids)\
                .order("created_at")\
                .execute()
        except Exception:
            logger.exception("Error loading group members")
            raise InternalError()

        members: Dict[str, List[str]] = {gid: [] for gid in group_ids}
        for m in result.data or []:
            members.setdefault(normalize_id(m["group_id"]), []).append(m["user_id"])
        return [self._to_group(r, members[normalize_id(r["id"])]) for r in rows]

    @staticmethod
    def _to_group(row: Dict[str, Any], member_ids: List[Any]) -> GroupResponse:
        admin_id = normalize_id(row["admin_id"])
        return GroupResponse(
            id=normalize_id(row["id"]),
            name=row["name"],
            admin=admin_id,
            is_public=bool(row.get("is_public")),
            # Admin first and duplicates collapsed, whatever the rows say
            members=unique_ids([admin_id, *member_ids]),
            created_at=row["created_at"],
        )
