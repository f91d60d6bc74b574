"""
Notifications module exceptions.
"""

from shared.exceptions import ExternalServiceError


class NotificationDeliveryError(ExternalServiceError):
    """Raised by a sender when a message could not be handed off."""

    def __init__(self, event: str, reason: str):
        super().__init__(
            f"Failed to deliver {event} notification: {reason}",
            service="notifications",
            code="NOTIFICATION_DELIVERY_FAILED",
            details={"event": event},
        )
