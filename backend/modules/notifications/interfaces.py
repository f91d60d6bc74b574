"""
Notifications module interfaces.

The request lifecycle engine signals events through INotificationService.
Delivery itself sits behind INotificationSender so it can be swapped for
an email or queue integration without touching the engine.
"""

from typing import Protocol, runtime_checkable

from modules.store.models import EmailPreferences, HelpRequest
from .models import NotificationMessage, UpdateEmailPreferencesRequest


@runtime_checkable
class INotificationSender(Protocol):
    """Hands a resolved notification to the outside world."""

    async def send(self, message: NotificationMessage) -> None:
        """
        Deliver a message.

        Raises:
            NotificationDeliveryError: If the message could not be handed off
        """
        ...


@runtime_checkable
class INotificationService(Protocol):
    """
    Interface for notification preferences and lifecycle signals.
    """

    async def get_preferences(self, user_id: str) -> EmailPreferences:
        """Get the user's preferences, or the defaults if none are stored."""
        ...

    async def update_preferences(
        self,
        user_id: str,
        request: UpdateEmailPreferencesRequest,
    ) -> EmailPreferences:
        ...

    async def request_created(self, request: HelpRequest) -> list[str]:
        """
        Signal that a request was posted.

        Recipients are the group's other members whose frequency is
        immediate.

        Returns:
            The user IDs that were notified
        """
        ...

    async def request_claimed(self, request: HelpRequest) -> list[str]:
        """
        Signal that a request was claimed.

        The recipient is the request's creator unless they disabled email.

        Returns:
            The user IDs that were notified
        """
        ...
