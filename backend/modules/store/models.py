"""
Membership store data models.

These are the durable records shared by every feature module. The store
hands out copies of them; services never mutate a stored record in place.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RequestStatus(str, Enum):
    """Lifecycle states of a help request."""

    OPEN = "open"
    CLAIMED = "claimed"
    FULFILLED = "fulfilled"
    EXPIRED = "expired"


class EmailFrequency(str, Enum):
    """How often a member wants to hear about new requests."""

    DISABLED = "disabled"
    DAILY = "daily"
    IMMEDIATE = "immediate"


class User(BaseModel):
    """A member's identity and contact profile."""

    id: str = Field(..., description="User ID (matches the auth subject)")
    email: str = Field(..., description="Unique email address")
    name: str = Field(default="", description="Display name")
    phone: str = Field(default="", description="Contact phone number")
    general_area: str = Field(default="", description="Free-text neighborhood")
    is_admin: bool = Field(default=False, description="Administrator flag")
    created_at: datetime = Field(default_factory=utc_now)


class Group(BaseModel):
    """An invitation-only circle of members."""

    id: str
    name: str
    created_by: str = Field(..., description="Owner user ID")
    created_at: datetime = Field(default_factory=utc_now)


class GroupMember(BaseModel):
    """Membership of one user in one group."""

    group_id: str
    user_id: str
    joined_at: datetime = Field(default_factory=utc_now)


class HelpRequest(BaseModel):
    """
    An errand posted to a group.

    claimed_by and claimed_at are set together or not at all. After
    fulfillment they stay set as the historical record of who helped.
    """

    id: str
    user_id: str = Field(..., description="Creator user ID")
    group_id: str
    item_description: str
    store_preference: Optional[str] = None
    needed_by: datetime
    pickup_notes: Optional[str] = None
    status: RequestStatus = RequestStatus.OPEN
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None
    fulfilled_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_claim_fields(self) -> "HelpRequest":
        """Reject records where only one of the claim fields is set."""
        if (self.claimed_by is None) != (self.claimed_at is None):
            raise ValueError("claimed_by and claimed_at must be set together")
        return self


class Invite(BaseModel):
    """A single-use invitation to join a group."""

    id: str
    group_id: str
    email: str
    token: str
    expires_at: datetime
    used_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)

    def is_redeemable(self, now: datetime) -> bool:
        return self.used_at is None and now <= self.expires_at


class UserLimits(BaseModel):
    """Per-user ceilings on open requests, created groups and joined groups."""

    user_id: str
    max_open_requests: int
    max_groups_created: int
    max_groups_joined: int
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class EmailPreferences(BaseModel):
    """A member's notification settings."""

    user_id: str
    frequency: EmailFrequency = EmailFrequency.DISABLED
    last_daily_sent: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
