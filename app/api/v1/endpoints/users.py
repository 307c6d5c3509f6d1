"""User endpoints."""

from fastapi import APIRouter

from app.core.exceptions import NotFoundException
from app.dependencies import CurrentUser, DatabaseSession
from app.schemas.common import ApiResponse
from app.schemas.users import UserResponse, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ApiResponse[UserResponse])
async def get_current_user_profile(current_user: CurrentUser):
    """Get current user's profile."""
    return ApiResponse(data=UserResponse.model_validate(current_user))


@router.put("/me", response_model=ApiResponse[UserResponse])
async def update_current_user_profile(
    user_data: UserUpdate,
    db: DatabaseSession,
    current_user: CurrentUser,
):
    """Update current user's profile."""
    user = await UserService.update_user(db, current_user["id"], user_data)

    if not user:
        raise NotFoundException("User not found")

    return ApiResponse(data=UserResponse.model_validate(user))
