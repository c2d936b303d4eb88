from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ApiResponse, UserOut, UserUpdate
from app.db.session import get_session
from app.db.models.user import User
from app.services.user_service import UserService
from app.auth import get_current_user

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(session: AsyncSession = Depends(get_session)) -> UserService:
    return UserService(session)


@router.get("/{user_id}", response_model=ApiResponse[UserOut])
async def get_user_profile(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    user = await user_service.get_user(user_id)
    return ApiResponse(content=UserOut.model_validate(user))


@router.patch("/{user_id}", response_model=ApiResponse[UserOut])
async def update_user_profile(
    user_id: UUID,
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """Update profile fields; users may only edit themselves."""
    user = await user_service.update_profile(current_user.id, user_id, payload)
    return ApiResponse(message="Profile updated", content=UserOut.model_validate(user))
