"""
Quota API endpoints.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_quota_service
from api.middleware.auth import get_current_member
from shared.models import AuthenticatedUser
from modules.store.models import UserLimits

from .interfaces import IQuotaService
from .models import UpdateLimitsRequest, UserLimitsWithCounts

router = APIRouter()


@router.get("", response_model=UserLimitsWithCounts)
async def get_my_limits(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IQuotaService = Depends(get_quota_service),
) -> UserLimitsWithCounts:
    """Get the current user's limits alongside their current usage."""
    return await service.get_limits_with_counts(user.id)


@router.put("/{user_id}", response_model=UserLimits)
async def update_limits(
    user_id: str,
    request: UpdateLimitsRequest,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IQuotaService = Depends(get_quota_service),
) -> UserLimits:
    """
    Change another user's limits.

    Requires admin privileges.
    """
    return await service.update_limits(user_id, request, actor_id=user.id)
