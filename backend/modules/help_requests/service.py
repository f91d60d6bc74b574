"""
Request lifecycle service.

Every transition reads the request, checks the guards that produce
user-facing errors, then applies the change with a conditional update on
the status it checked. If the conditional update does not apply, another
writer got there first and the caller gets the same error as if it had
read the newer state.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from shared.config import Settings, get_settings
from shared.locks import KeyedLock
from shared.validation import sanitize_input, sanitize_optional
from modules.store.interfaces import IMembershipStore
from modules.store.models import HelpRequest, RequestStatus, utc_now
from modules.quotas.interfaces import IQuotaService
from modules.notifications.interfaces import INotificationService

from .exceptions import (
    FulfilledRequestError,
    ItemDescriptionRequiredError,
    NeededByInPastError,
    NotClaimerError,
    NotRequestOwnerError,
    RequestGroupAccessDeniedError,
    RequestNotClaimableError,
    RequestNotClaimedError,
    RequestNotFoundError,
    SelfClaimError,
)
from .interfaces import IRequestLifecycleService
from .models import CreateHelpRequest

logger = logging.getLogger(__name__)

DELETABLE_STATUSES = (RequestStatus.OPEN, RequestStatus.CLAIMED, RequestStatus.EXPIRED)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes from clients are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RequestLifecycleService(IRequestLifecycleService):
    """
    Implements IRequestLifecycleService over any IMembershipStore.

    Notification signals are optional; without a notification service the
    engine only changes state.
    """

    def __init__(
        self,
        store: IMembershipStore,
        quotas: IQuotaService,
        notifications: Optional[INotificationService] = None,
        settings: Optional[Settings] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self._store = store
        self._quotas = quotas
        self._notifications = notifications
        self._settings = settings or get_settings()
        self._locks = locks or KeyedLock()

    def _require_request(self, request_id: str) -> HelpRequest:
        request = self._store.get_request(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    def _require_member(
        self,
        group_id: str,
        user_id: str,
        message: str = "You are not a member of this group",
    ) -> None:
        if self._store.get_member(group_id, user_id) is None:
            logger.debug(f"User {user_id} rejected: not a member of group {group_id}")
            raise RequestGroupAccessDeniedError(group_id, user_id, message)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def create_request(
        self,
        creator_id: str,
        request: CreateHelpRequest,
    ) -> HelpRequest:
        # Quota check and insert must not interleave with the same user's other creates
        async with self._locks.hold(f"user:{creator_id}"):
            await self._quotas.ensure_can_create_request(creator_id)

            if not request.item_description.strip():
                raise ItemDescriptionRequiredError()

            now = utc_now()
            needed_by = _as_utc(request.needed_by)
            grace = timedelta(seconds=self._settings.needed_by_grace_seconds)
            if needed_by <= now - grace:
                raise NeededByInPastError(needed_by.isoformat())

            self._require_member(
                request.group_id, creator_id, "You are not a member of the specified group"
            )

            description = sanitize_input(request.item_description)
            if not description:
                raise ItemDescriptionRequiredError()

            created = self._store.insert_request(
                HelpRequest(
                    id=self._store.generate_id(),
                    user_id=creator_id,
                    group_id=request.group_id,
                    item_description=description,
                    store_preference=sanitize_optional(request.store_preference),
                    needed_by=needed_by,
                    pickup_notes=sanitize_optional(request.pickup_notes),
                    status=RequestStatus.OPEN,
                    created_at=now,
                )
            )
            if created is None:
                # The group was deleted after the membership check
                raise RequestGroupAccessDeniedError(
                    request.group_id, creator_id, "You are not a member of the specified group"
                )

        logger.info(f"Request {created.id} created by {creator_id} in group {created.group_id}")
        if self._notifications is not None:
            await self._notifications.request_created(created)
        return created

    async def claim_request(self, request_id: str, claimer_id: str) -> HelpRequest:
        request = self._require_request(request_id)
        if request.status != RequestStatus.OPEN:
            raise RequestNotClaimableError(request_id, request.status.value)
        if request.user_id == claimer_id:
            raise SelfClaimError(request_id)
        self._require_member(request.group_id, claimer_id)

        claimed = self._store.update_request(
            request_id,
            {
                "status": RequestStatus.CLAIMED,
                "claimed_by": claimer_id,
                "claimed_at": utc_now(),
            },
            expected_status=RequestStatus.OPEN,
        )
        if claimed is None:
            logger.debug(f"Claim of request {request_id} by {claimer_id} lost a race")
            raise self._conflict_after_race(request_id, RequestNotClaimableError)

        logger.info(f"Request {request_id} claimed by {claimer_id}")
        if self._notifications is not None:
            await self._notifications.request_claimed(claimed)
        return claimed

    async def unclaim_request(self, request_id: str, caller_id: str) -> HelpRequest:
        request = self._require_request(request_id)
        if request.status != RequestStatus.CLAIMED:
            raise RequestNotClaimedError(request_id, request.status.value)
        if request.claimed_by != caller_id:
            raise NotClaimerError(
                request_id, caller_id, "You can only unclaim requests that you have claimed"
            )

        released = self._store.update_request(
            request_id,
            {"status": RequestStatus.OPEN, "claimed_by": None, "claimed_at": None},
            expected_status=RequestStatus.CLAIMED,
            expected_claimed_by=caller_id,
        )
        if released is None:
            raise self._conflict_after_race(request_id, RequestNotClaimedError)

        logger.info(f"Request {request_id} unclaimed by {caller_id}")
        return released

    async def fulfill_request(self, request_id: str, caller_id: str) -> HelpRequest:
        request = self._require_request(request_id)
        if request.status != RequestStatus.CLAIMED:
            raise RequestNotClaimedError(
                request_id, request.status.value, "Request is not in claimed status"
            )
        if request.claimed_by != caller_id:
            raise NotClaimerError(
                request_id, caller_id, "You can only fulfill requests you have claimed"
            )

        fulfilled = self._store.update_request(
            request_id,
            {"status": RequestStatus.FULFILLED, "fulfilled_at": utc_now()},
            expected_status=RequestStatus.CLAIMED,
            expected_claimed_by=caller_id,
        )
        if fulfilled is None:
            current = self._require_request(request_id)
            raise RequestNotClaimedError(
                request_id, current.status.value, "Request is not in claimed status"
            )

        logger.info(f"Request {request_id} fulfilled by {caller_id}")
        return fulfilled

    async def delete_request(self, request_id: str, caller_id: str) -> None:
        request = self._require_request(request_id)
        if request.user_id != caller_id:
            raise NotRequestOwnerError(request_id, caller_id)
        if request.status == RequestStatus.FULFILLED:
            raise FulfilledRequestError(request_id)

        if not self._store.delete_request(request_id, DELETABLE_STATUSES):
            # Fulfilled or removed between the read and the delete
            current = self._require_request(request_id)
            raise FulfilledRequestError(current.id)

        logger.info(f"Request {request_id} deleted by {caller_id}")

    def _conflict_after_race(self, request_id: str, error_cls: type) -> Exception:
        current = self._require_request(request_id)
        return error_cls(request_id, current.status.value)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_request(self, request_id: str, user_id: str) -> HelpRequest:
        request = self._require_request(request_id)
        self._require_member(request.group_id, user_id)
        return request

    async def get_group_requests(self, group_id: str, user_id: str) -> list[HelpRequest]:
        self._require_member(group_id, user_id)
        return self._store.list_requests(group_id=group_id)

    async def get_user_requests(self, user_id: str) -> list[HelpRequest]:
        return self._store.list_requests(user_id=user_id)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    async def expire_overdue_requests(
        self, now: Optional[datetime] = None
    ) -> list[HelpRequest]:
        cutoff = now or utc_now()
        expired = []
        for request in self._store.list_overdue_requests(cutoff):
            # Skips requests claimed since the listing
            updated = self._store.update_request(
                request.id,
                {"status": RequestStatus.EXPIRED},
                expected_status=RequestStatus.OPEN,
            )
            if updated is not None:
                expired.append(updated)

        if expired:
            logger.info(f"Expired {len(expired)} overdue requests")
        return expired


# Module-level instance getter
_service_instance: Optional[RequestLifecycleService] = None


def get_request_service() -> RequestLifecycleService:
    """Get the request lifecycle service singleton."""
    global _service_instance
    if _service_instance is None:
        from modules.store.factory import get_membership_store
        from modules.quotas.service import get_quota_service
        from modules.notifications.service import get_notification_service
        _service_instance = RequestLifecycleService(
            get_membership_store(),
            get_quota_service(),
            notifications=get_notification_service(),
        )
    return _service_instance


def reset_request_service() -> None:
    """Reset the request lifecycle service singleton (for testing)."""
    global _service_instance
    _service_instance = None
