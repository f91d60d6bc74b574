"""
Quota evaluation service.

Usage is recomputed from the membership store on every call so that
concurrent writers can never leave a stale count behind.
"""

import logging
from typing import Optional

from shared.config import Settings, get_settings
from modules.store.interfaces import IMembershipStore
from modules.store.models import UserLimits, utc_now

from .exceptions import (
    GroupsCreatedLimitError,
    GroupsJoinedLimitError,
    LimitsAdminRequiredError,
    OpenRequestLimitError,
)
from .interfaces import IQuotaService
from .models import UpdateLimitsRequest, UserCounts, UserLimitsWithCounts

logger = logging.getLogger(__name__)


class QuotaService(IQuotaService):
    """
    Implements IQuotaService over any IMembershipStore.
    """

    def __init__(self, store: IMembershipStore, settings: Optional[Settings] = None):
        self._store = store
        self._settings = settings or get_settings()

    def _default_limits(self, user_id: str) -> UserLimits:
        now = utc_now()
        return UserLimits(
            user_id=user_id,
            max_open_requests=self._settings.default_max_open_requests,
            max_groups_created=self._settings.default_max_groups_created,
            max_groups_joined=self._settings.default_max_groups_joined,
            created_at=now,
            updated_at=now,
        )

    async def get_counts(self, user_id: str) -> UserCounts:
        return UserCounts(
            open_requests_count=self._store.count_open_requests(user_id),
            groups_created_count=self._store.count_groups_created(user_id),
            groups_joined_count=self._store.count_memberships(user_id),
        )

    async def get_limits(self, user_id: str) -> UserLimits:
        limits = self._store.get_limits(user_id)
        if limits is None:
            limits = self._store.insert_limits(self._default_limits(user_id))
            logger.debug(f"Materialized default limits for user {user_id}")
        return limits

    async def get_limits_with_counts(self, user_id: str) -> UserLimitsWithCounts:
        limits = await self.get_limits(user_id)
        counts = await self.get_counts(user_id)
        return UserLimitsWithCounts(limits=limits, counts=counts)

    async def can_create_request(self, user_id: str) -> bool:
        usage = await self.get_limits_with_counts(user_id)
        return usage.counts.open_requests_count < usage.limits.max_open_requests

    async def can_create_group(self, user_id: str) -> bool:
        usage = await self.get_limits_with_counts(user_id)
        return usage.counts.groups_created_count < usage.limits.max_groups_created

    async def can_join_group(self, user_id: str) -> bool:
        usage = await self.get_limits_with_counts(user_id)
        return usage.counts.groups_joined_count < usage.limits.max_groups_joined

    async def ensure_can_create_request(self, user_id: str) -> None:
        usage = await self.get_limits_with_counts(user_id)
        if usage.counts.open_requests_count >= usage.limits.max_open_requests:
            raise OpenRequestLimitError(
                usage.limits.max_open_requests, usage.counts.open_requests_count
            )

    async def ensure_can_create_group(self, user_id: str) -> None:
        usage = await self.get_limits_with_counts(user_id)
        if usage.counts.groups_created_count >= usage.limits.max_groups_created:
            raise GroupsCreatedLimitError(
                usage.limits.max_groups_created, usage.counts.groups_created_count
            )

    async def ensure_can_join_group(self, user_id: str) -> None:
        usage = await self.get_limits_with_counts(user_id)
        if usage.counts.groups_joined_count >= usage.limits.max_groups_joined:
            raise GroupsJoinedLimitError(
                usage.limits.max_groups_joined, usage.counts.groups_joined_count
            )

    async def update_limits(
        self,
        user_id: str,
        request: UpdateLimitsRequest,
        actor_id: str,
    ) -> UserLimits:
        actor = self._store.get_user(actor_id)
        if actor is None or not actor.is_admin:
            raise LimitsAdminRequiredError(actor_id)

        current = await self.get_limits(user_id)
        changes = request.model_dump(exclude_none=True)
        if not changes:
            return current

        changes["updated_at"] = utc_now()
        updated = self._store.update_limits(user_id, changes)
        logger.info(f"Limits for user {user_id} changed by {actor_id}: {changes}")
        return updated or current


# Module-level instance getter
_service_instance: Optional[QuotaService] = None


def get_quota_service() -> QuotaService:
    """Get the quota service singleton."""
    global _service_instance
    if _service_instance is None:
        from modules.store.factory import get_membership_store
        _service_instance = QuotaService(get_membership_store())
    return _service_instance


def reset_quota_service() -> None:
    """Reset the quota service singleton (for testing)."""
    global _service_instance
    _service_instance = None
