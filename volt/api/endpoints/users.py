"""
Current-user profile endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from volt.core.database import get_db
from volt.models.user import User
from volt.services.auth_service import auth_service, get_current_user
from volt.schemas.auth import MessageResponse, UserResponse, UserUpdate

router = APIRouter()


@router.get("", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get the current user's profile."""
    return UserResponse.model_validate(current_user)


@router.put("", response_model=UserResponse)
async def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update username, email or password."""
    user = await auth_service.update_user(
        current_user,
        db,
        username=data.username,
        email=data.email,
        password=data.password,
    )
    return UserResponse.model_validate(user)


@router.delete("", response_model=MessageResponse)
async def delete_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete the account and every credential it owns."""
    await auth_service.delete_user(current_user, db)
    return MessageResponse(message="User deleted")
