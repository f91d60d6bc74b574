"""
Notifications module data models.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from modules.store.models import EmailFrequency, HelpRequest


class NotificationEvent(str, Enum):
    """Lifecycle events that produce a notification signal."""

    REQUEST_CREATED = "request_created"
    REQUEST_CLAIMED = "request_claimed"


class Recipient(BaseModel):
    """Who a notification is for."""

    user_id: str
    email: str
    name: str = ""


class NotificationMessage(BaseModel):
    """
    A signal handed to the sender.

    Carries the request snapshot and the resolved recipients; formatting
    and delivery are up to the sender.
    """

    event: NotificationEvent
    request: HelpRequest
    group_name: Optional[str] = None
    actor_name: Optional[str] = Field(
        default=None,
        description="Creator for request_created, claimer for request_claimed",
    )
    recipients: list[Recipient] = Field(default_factory=list)


class UpdateEmailPreferencesRequest(BaseModel):
    """Request body for changing notification settings."""

    frequency: EmailFrequency
