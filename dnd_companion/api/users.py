"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile

from dnd_companion.api.dependencies import (
    get_current_user,
    get_picture_store,
    get_user_service,
    require_self,
)
from dnd_companion.models.user import User
from dnd_companion.schemas.auth import MessageResponse
from dnd_companion.schemas.user import UserDetailResponse, UserResponse, UserUpdate
from dnd_companion.services.uploads import ProfilePictureStore
from dnd_companion.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserDetailResponse] | UserDetailResponse)
def get_users(
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
    user_id: Annotated[int | None, Query(alias="id", description="Return only this user")] = None,
):
    """Get all users, or a single user when ``id`` is given."""
    if user_id is not None:
        return users.get(user_id)
    return users.list_users()


@router.put("/{user_id}", response_model=UserDetailResponse)
def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Update the current user's profile."""
    require_self(user_id, current_user)
    return users.update(current_user, user_data)


@router.put("/{user_id}/profile-pic", response_model=UserResponse)
async def update_profile_pic(
    user_id: int,
    file: Annotated[UploadFile, File(description="Profile picture (any image type)")],
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
    pictures: Annotated[ProfilePictureStore, Depends(get_picture_store)],
):
    """Upload a new profile picture.

    Note: This endpoint must remain async because UploadFile.read() is async.
    """
    require_self(user_id, current_user)

    data = await file.read()
    url = pictures.save(current_user.id, data, file.content_type, file.filename)
    return users.set_profile_pic(current_user, url)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    users: Annotated[UserService, Depends(get_user_service)],
):
    """Delete the current user's account and campaigns."""
    require_self(user_id, current_user)
    users.delete(current_user)
    return MessageResponse(message="User deleted successfully!")
