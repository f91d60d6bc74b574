"""
Notification service.

Resolves who should hear about a lifecycle event and passes the message
to the configured sender. Delivery is best-effort: a failing sender is
logged and never undoes the state change that triggered it.
"""

import logging
from typing import Optional

from modules.store.interfaces import IMembershipStore
from modules.store.models import EmailFrequency, EmailPreferences, HelpRequest, utc_now

from .exceptions import NotificationDeliveryError
from .interfaces import INotificationSender, INotificationService
from .models import (
    NotificationEvent,
    NotificationMessage,
    Recipient,
    UpdateEmailPreferencesRequest,
)

logger = logging.getLogger(__name__)


class LoggingNotificationSender(INotificationSender):
    """Default sender: records each message in the application log."""

    async def send(self, message: NotificationMessage) -> None:
        logger.info(
            f"Notification {message.event.value} for request {message.request.id} "
            f"to {len(message.recipients)} recipient(s)"
        )


class NotificationService(INotificationService):
    """
    Implements INotificationService over any IMembershipStore.
    """

    def __init__(
        self,
        store: IMembershipStore,
        sender: Optional[INotificationSender] = None,
    ):
        self._store = store
        self._sender = sender or LoggingNotificationSender()

    async def get_preferences(self, user_id: str) -> EmailPreferences:
        preferences = self._store.get_email_preferences(user_id)
        return preferences or EmailPreferences(user_id=user_id)

    async def update_preferences(
        self,
        user_id: str,
        request: UpdateEmailPreferencesRequest,
    ) -> EmailPreferences:
        current = await self.get_preferences(user_id)
        updated = current.model_copy(
            update={"frequency": request.frequency, "updated_at": utc_now()}
        )
        stored = self._store.upsert_email_preferences(updated)
        logger.info(f"Email frequency for user {user_id} set to {request.frequency.value}")
        return stored

    def _frequency(self, user_id: str) -> EmailFrequency:
        preferences = self._store.get_email_preferences(user_id)
        return preferences.frequency if preferences else EmailFrequency.DISABLED

    def _display_name(self, user_id: Optional[str]) -> Optional[str]:
        if user_id is None:
            return None
        user = self._store.get_user(user_id)
        return user.name if user else None

    async def request_created(self, request: HelpRequest) -> list[str]:
        member_ids = [
            m.user_id
            for m in self._store.list_members(request.group_id)
            if m.user_id != request.user_id
        ]
        wanted = [uid for uid in member_ids if self._frequency(uid) == EmailFrequency.IMMEDIATE]
        recipients = [
            Recipient(user_id=u.id, email=u.email, name=u.name)
            for u in self._store.list_users(wanted)
        ]
        logger.debug(
            f"Request {request.id}: {len(recipients)} of {len(member_ids)} "
            f"members want immediate notification"
        )
        return await self._dispatch(
            NotificationEvent.REQUEST_CREATED,
            request,
            recipients,
            actor_name=self._display_name(request.user_id),
        )

    async def request_claimed(self, request: HelpRequest) -> list[str]:
        creator = self._store.get_user(request.user_id)
        if creator is None or self._frequency(creator.id) == EmailFrequency.DISABLED:
            logger.debug(f"Request {request.id}: creator does not receive claim notices")
            return []
        recipients = [Recipient(user_id=creator.id, email=creator.email, name=creator.name)]
        return await self._dispatch(
            NotificationEvent.REQUEST_CLAIMED,
            request,
            recipients,
            actor_name=self._display_name(request.claimed_by),
        )

    async def _dispatch(
        self,
        event: NotificationEvent,
        request: HelpRequest,
        recipients: list[Recipient],
        actor_name: Optional[str] = None,
    ) -> list[str]:
        if not recipients:
            return []

        group = self._store.get_group(request.group_id)
        message = NotificationMessage(
            event=event,
            request=request,
            group_name=group.name if group else None,
            actor_name=actor_name,
            recipients=recipients,
        )
        try:
            await self._sender.send(message)
        except NotificationDeliveryError as e:
            logger.warning(f"Notification for request {request.id} not delivered: {e.message}")
            return []
        return [r.user_id for r in recipients]


# Module-level instance getter
_service_instance: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Get the notification service singleton."""
    global _service_instance
    if _service_instance is None:
        from modules.store.factory import get_membership_store
        _service_instance = NotificationService(get_membership_store())
    return _service_instance


def reset_notification_service() -> None:
    """Reset the notification service singleton (for testing)."""
    global _service_instance
    _service_instance = None
