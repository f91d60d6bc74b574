"""
User profile service.
"""

import logging
from typing import Optional

from shared.models import AuthenticatedUser
from shared.validation import normalize_email, sanitize_input, validate_phone
from modules.store.interfaces import IMembershipStore
from modules.store.models import User, utc_now

from .exceptions import InvalidPhoneError, UserNotFoundError
from .interfaces import IUserService
from .models import UpdateProfileRequest

logger = logging.getLogger(__name__)


class UserService(IUserService):
    """
    Implements IUserService over any IMembershipStore.
    """

    def __init__(self, store: IMembershipStore):
        self._store = store

    async def ensure_user(self, identity: AuthenticatedUser) -> User:
        existing = self._store.get_user(identity.id)
        if existing is not None:
            return existing

        user = self._store.upsert_user(
            User(
                id=identity.id,
                email=normalize_email(identity.email),
                created_at=utc_now(),
            )
        )
        logger.info(f"Provisioned profile for user {user.id}")
        return user

    async def get_profile(self, user_id: str) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> User:
        phone = request.phone.strip()
        if not validate_phone(phone):
            raise InvalidPhoneError(phone)

        current = await self.get_profile(user_id)
        updated = current.model_copy(
            update={
                "name": sanitize_input(request.name),
                "phone": sanitize_input(phone),
                "general_area": sanitize_input(request.general_area),
            }
        )
        return self._store.upsert_user(updated)


# Module-level instance getter
_service_instance: Optional[UserService] = None


def get_user_service() -> UserService:
    """Get the user service singleton."""
    global _service_instance
    if _service_instance is None:
        from modules.store.factory import get_membership_store
        _service_instance = UserService(get_membership_store())
    return _service_instance


def reset_user_service() -> None:
    """Reset the user service singleton (for testing)."""
    global _service_instance
    _service_instance = None
