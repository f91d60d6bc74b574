"""
Notifications module.

Stores email preferences and turns request lifecycle events into
notification signals for a pluggable sender.

Public API:
- INotificationService: Preferences and lifecycle signals
- INotificationSender: Delivery hand-off
- NotificationMessage: What a sender receives
"""

from .interfaces import INotificationSender, INotificationService
from .models import (
    NotificationEvent,
    NotificationMessage,
    Recipient,
    UpdateEmailPreferencesRequest,
)
from .exceptions import NotificationDeliveryError
from .service import (
    LoggingNotificationSender,
    NotificationService,
    get_notification_service,
    reset_notification_service,
)

__all__ = [
    # Interfaces
    "INotificationSender",
    "INotificationService",
    # Models
    "NotificationEvent",
    "NotificationMessage",
    "Recipient",
    "UpdateEmailPreferencesRequest",
    # Exceptions
    "NotificationDeliveryError",
    # Service
    "LoggingNotificationSender",
    "NotificationService",
    "get_notification_service",
    "reset_notification_service",
]
