from fastapi import APIRouter, Depends, Query
from groupchat.core.dependencies import get_membership_service
from groupchat.modules.groups.schemas import (
    GroupCreate, GroupJoin, GroupMemberAdd, GroupMemberRemove,
    GroupResponse, JoinGroupResponse
)
from groupchat.modules.groups.service import MembershipService
from groupchat.modules.users.schemas import UserDetail
from typing import List, Optional

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("/create", response_model=GroupResponse, status_code=201)
def create_group(
    group_data: GroupCreate,
    service: MembershipService = Depends(get_membership_service)
):
    """Create a group; the creator becomes its admin and first member"""
    return service.create_group(group_data.name, group_data.admin, group_data.is_public)


@router.get("/public", response_model=List[GroupResponse])
def list_public_groups(
    service: MembershipService = Depends(get_membership_service)
):
    """List every public group"""
    return service.list_public_groups()


@router.get("/user/{user_id}", response_model=List[GroupResponse])
def list_user_groups(
    user_id: str,
    service: MembershipService = Depends(get_membership_service)
):
    """List groups the user is a member of"""
    return service.list_user_groups(user_id)


@router.post("/join", response_model=JoinGroupResponse)
def join_group(
    join_data: GroupJoin,
    service: MembershipService = Depends(get_membership_service)
):
    """Join a group. Joining twice is not an error."""
    service.join_group(join_data.group_id, join_data.user_id)
    return JoinGroupResponse(message="Joined group successfully")


@router.post("/{group_id}/members", response_model=GroupResponse)
def add_member(
    group_id: str,
    member_data: GroupMemberAdd,
    service: MembershipService = Depends(get_membership_service)
):
    """Add a user to the group (admin only)"""
    return service.add_member(group_id, member_data.admin_id, member_data.user_id)


@router.delete("/{group_id}/members/{user_id}", response_model=GroupResponse)
def remove_member(
    group_id: str,
    user_id: str,
    member_data: GroupMemberRemove,
    service: MembershipService = Depends(get_membership_service)
):
    """Remove a user from the group (admin only; the admin cannot be removed)"""
    return service.remove_member(group_id, member_data.admin_id, user_id)


@router.get("/{group_id}/members", response_model=List[UserDetail])
def list_members(
    group_id: str,
    requester_id: Optional[str] = Query(None, alias="requesterId"),
    service: MembershipService = Depends(get_membership_service)
):
    """Resolve the group's members to user profiles"""
    return service.list_members(group_id, requester_id)
