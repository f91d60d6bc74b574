"""
Notification preference endpoints.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_notification_service
from api.middleware.auth import get_current_member
from shared.models import AuthenticatedUser
from modules.store.models import EmailPreferences

from .interfaces import INotificationService
from .models import UpdateEmailPreferencesRequest

router = APIRouter()


@router.get("/preferences", response_model=EmailPreferences)
async def get_preferences(
    user: AuthenticatedUser = Depends(get_current_member),
    service: INotificationService = Depends(get_notification_service),
) -> EmailPreferences:
    """Get the current user's email notification settings."""
    return await service.get_preferences(user.id)


@router.put("/preferences", response_model=EmailPreferences)
async def update_preferences(
    request: UpdateEmailPreferencesRequest,
    user: AuthenticatedUser = Depends(get_current_member),
    service: INotificationService = Depends(get_notification_service),
) -> EmailPreferences:
    """Change how often the current user hears about new requests."""
    return await service.update_preferences(user.id, request)
