"""
Users module interface.
"""

from typing import Protocol, runtime_checkable

from shared.models import AuthenticatedUser
from modules.store.models import User
from .models import UpdateProfileRequest


@runtime_checkable
class IUserService(Protocol):
    """
    Interface for member profiles.
    """

    async def ensure_user(self, identity: AuthenticatedUser) -> User:
        """
        Get the profile for a verified caller, creating an empty one on
        first access.
        """
        ...

    async def get_profile(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: If no profile exists
        """
        ...

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> User:
        """
        Replace the caller's name, phone and area.

        Raises:
            UserNotFoundError: If no profile exists
            InvalidPhoneError: If the phone number is malformed
        """
        ...
