"""
Identity & membership store module.

Durable records for users, groups, memberships, help requests, invites,
per-user limits and email preferences.

Public API:
- IMembershipStore: Storage contract used by every feature module
- InMemoryStore: Single-process implementation
- SupabaseStore: PostgREST implementation with conditional updates
"""

from .interfaces import IMembershipStore
from .models import (
    EmailFrequency,
    EmailPreferences,
    Group,
    GroupMember,
    HelpRequest,
    Invite,
    RequestStatus,
    User,
    UserLimits,
    utc_now,
)
from .memory import InMemoryStore
from .repository import SupabaseStore
from .factory import get_membership_store, reset_membership_store

__all__ = [
    # Interfaces
    "IMembershipStore",
    # Models
    "EmailFrequency",
    "EmailPreferences",
    "Group",
    "GroupMember",
    "HelpRequest",
    "Invite",
    "RequestStatus",
    "User",
    "UserLimits",
    "utc_now",
    # Implementations
    "InMemoryStore",
    "SupabaseStore",
    "get_membership_store",
    "reset_membership_store",
]
