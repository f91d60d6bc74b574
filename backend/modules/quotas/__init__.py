"""
Quota module.

Derives per-user usage counts and compares them against configurable limits.

Public API:
- IQuotaService: Interface for quota checks
- QuotaService: Store-backed implementation
- UserCounts / UserLimitsWithCounts: Usage models
"""

from .interfaces import IQuotaService
from .models import UpdateLimitsRequest, UserCounts, UserLimitsWithCounts
from .exceptions import (
    OpenRequestLimitError,
    GroupsCreatedLimitError,
    GroupsJoinedLimitError,
    LimitsAdminRequiredError,
)
from .service import QuotaService, get_quota_service, reset_quota_service

__all__ = [
    # Interfaces
    "IQuotaService",
    # Models
    "UpdateLimitsRequest",
    "UserCounts",
    "UserLimitsWithCounts",
    # Exceptions
    "OpenRequestLimitError",
    "GroupsCreatedLimitError",
    "GroupsJoinedLimitError",
    "LimitsAdminRequiredError",
    # Service
    "QuotaService",
    "get_quota_service",
    "reset_quota_service",
]
