"""
Quota module interface.

The groups and help_requests modules depend on IQuotaService to guard
their create/join operations; they never count rows themselves.
"""

from typing import Protocol, runtime_checkable

from modules.store.models import UserLimits
from .models import UpdateLimitsRequest, UserCounts, UserLimitsWithCounts


@runtime_checkable
class IQuotaService(Protocol):
    """
    Interface for per-user quota evaluation.
    """

    async def get_counts(self, user_id: str) -> UserCounts:
        """
        Compute the user's current usage.

        Counts are always derived from the store, never cached.
        """
        ...

    async def get_limits(self, user_id: str) -> UserLimits:
        """
        Get the user's limits, materializing the defaults on first access.
        """
        ...

    async def get_limits_with_counts(self, user_id: str) -> UserLimitsWithCounts:
        ...

    async def can_create_request(self, user_id: str) -> bool:
        ...

    async def can_create_group(self, user_id: str) -> bool:
        ...

    async def can_join_group(self, user_id: str) -> bool:
        ...

    async def ensure_can_create_request(self, user_id: str) -> None:
        """
        Raises:
            OpenRequestLimitError: If the user is at their open-request limit
        """
        ...

    async def ensure_can_create_group(self, user_id: str) -> None:
        """
        Raises:
            GroupsCreatedLimitError: If the user is at their group-creation limit
        """
        ...

    async def ensure_can_join_group(self, user_id: str) -> None:
        """
        Raises:
            GroupsJoinedLimitError: If the user is at their membership limit
        """
        ...

    async def update_limits(
        self,
        user_id: str,
        request: UpdateLimitsRequest,
        actor_id: str,
    ) -> UserLimits:
        """
        Change a user's limits.

        Raises:
            LimitsAdminRequiredError: If the actor is not an administrator
        """
        ...
