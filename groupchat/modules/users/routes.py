from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr

from groupchat.core.dependencies import get_user_service
from groupchat.core.exceptions import NotFoundError
from groupchat.modules.users.schemas import UserDetail
from groupchat.modules.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserDetail)
def find_user_by_email(
    email: EmailStr = Query(...),
    service: UserService = Depends(get_user_service)
):
    """Look up a user profile by email (used to add people to a group)"""
    user = service.get_user_by_email(email)
    if user is None:
        raise NotFoundError("User not found")
    return user
