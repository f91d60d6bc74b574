"""
User profile endpoints.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_user_service
from api.middleware.auth import get_current_member
from shared.models import AuthenticatedUser
from modules.store.models import User

from .interfaces import IUserService
from .models import UpdateProfileRequest

router = APIRouter()


@router.get("/me", response_model=User)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IUserService = Depends(get_user_service),
) -> User:
    """
    Get the current user's profile.

    Requires authentication. The profile is created on first access.
    """
    return await service.get_profile(user.id)


@router.put("/me", response_model=User)
async def update_current_user_profile(
    request: UpdateProfileRequest,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IUserService = Depends(get_user_service),
) -> User:
    """Update the current user's name, phone and area."""
    return await service.update_profile(user.id, request)
