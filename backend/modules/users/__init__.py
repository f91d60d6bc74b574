"""
Users module.

Member profiles, provisioned from the verified token on first access.
"""

from .interfaces import IUserService
from .models import UpdateProfileRequest
from .exceptions import InvalidPhoneError, UserNotFoundError
from .service import UserService, get_user_service, reset_user_service

__all__ = [
    "IUserService",
    "UpdateProfileRequest",
    "InvalidPhoneError",
    "UserNotFoundError",
    "UserService",
    "get_user_service",
    "reset_user_service",
]
