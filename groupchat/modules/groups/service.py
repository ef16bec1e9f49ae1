import logging
from typing import List, Optional

from groupchat.core.exceptions import ConflictError, ForbiddenError, InvalidError, NotFoundError
from groupchat.core.ids import normalize_id
from groupchat.modules.groups.schemas import GroupResponse
from groupchat.modules.groups.store import GroupStore
from groupchat.modules.users.schemas import UserDetail
from groupchat.modules.users.service import UserService

logger = logging.getLogger(__name__)


class MembershipService:
    """Group creation and membership rules. Only the admin may add or remove members."""

    def __init__(self, store: GroupStore, users: UserService, members_list_requires_membership: bool = False):
        self.store = store
        self.users = users
        self.members_list_requires_membership = members_list_requires_membership

    def create_group(self, name: str, admin_id: str, is_public: bool) -> GroupResponse:
        name = (name or "").strip()
        admin_id = normalize_id(admin_id)
        if not name:
            raise InvalidError("Group name is required")
        if not admin_id:
            raise InvalidError("Group admin is required")
        group = self.store.create_group(name, admin_id, is_public)
        logger.info(f"Group {group.id} created by {admin_id} (public={is_public})")
        return group

    def get_group(self, group_id: str) -> GroupResponse:
        group = self.store.get_group(group_id)
        if group is None:
            raise NotFoundError("Group not found")
        return group

    @staticmethod
    def is_member(group: GroupResponse, user_id: Optional[str]) -> bool:
        user_id = normalize_id(user_id)
        return bool(user_id) and user_id in group.members

    @staticmethod
    def is_admin(group: GroupResponse, user_id: Optional[str]) -> bool:
        return normalize_id(user_id) == group.admin

    def list_public_groups(self) -> List[GroupResponse]:
        return self.store.list_public_groups()

    def list_user_groups(self, user_id: str) -> List[GroupResponse]:
        return self.store.list_groups_for_user(normalize_id(user_id))

    def join_group(self, group_id: str, user_id: str) -> None:
        group = self.get_group(group_id)
        user_id = normalize_id(user_id)
        if not user_id:
            raise InvalidError("User id is required")
        if self.is_member(group, user_id):
            return
        self.store.ensure_member(group.id, user_id)
        logger.info(f"User {user_id} joined group {group.id}")

    def add_member(self, group_id: str, requester_id: str, user_id: str) -> GroupResponse:
        group = self.get_group(group_id)
        if not self.is_admin(group, requester_id):
            raise ForbiddenError("Only admin can add users")

        user_id = normalize_id(user_id)
        if self.users.get_user_by_id(user_id) is None:
            raise NotFoundError("User not found")
        if self.is_member(group, user_id):
            raise ConflictError("User already in group")
        if not self.store.add_member(group.id, user_id):
            raise ConflictError("User already in group")

        logger.info(f"User {user_id} added to group {group.id} by admin")
        return self.get_group(group.id)

    def remove_member(self, group_id: str, requester_id: str, user_id: str) -> GroupResponse:
        group = self.get_group(group_id)
        if not self.is_admin(group, requester_id):
            raise ForbiddenError("Only admin can remove users")

        user_id = normalize_id(user_id)
        if self.is_admin(group, user_id):
            raise ConflictError("Cannot remove group admin")

        if self.store.remove_member(group.id, user_id):
            logger.info(f"User {user_id} removed from group {group.id}")
        return self.get_group(group.id)

    def list_members(self, group_id: str, requester_id: Optional[str] = None) -> List[UserDetail]:
        group = self.get_group(group_id)
        if self.members_list_requires_membership and not self.is_member(group, requester_id):
            raise ForbiddenError("Only group members can list members")
        return self.users.get_users_by_ids(group.members)
