"""
Membership store interface.

Feature modules depend on IMembershipStore, never on a concrete store.
The contract is row-level: every state transition that must be exclusive
is expressed as a conditional write (compare-and-set) that reports whether
it applied, so a lost race surfaces as a guard failure rather than a
silent overwrite.
"""

from datetime import datetime
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from .models import (
    EmailPreferences,
    Group,
    GroupMember,
    HelpRequest,
    Invite,
    RequestStatus,
    User,
    UserLimits,
)


@runtime_checkable
class IMembershipStore(Protocol):
    """
    Durable storage for users, groups, memberships, requests, invites,
    limits and email preferences.

    Implementations must make each individual method atomic. Methods that
    take an expected state (update_request, delete_request, insert_member,
    mark_invite_used) must evaluate the condition and apply the write as
    one indivisible step.
    """

    def generate_id(self) -> str:
        """Return a new unique opaque identifier."""
        ...

    # Users

    def get_user(self, user_id: str) -> Optional[User]:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email (case-insensitive)."""
        ...

    def list_users(self, user_ids: Iterable[str]) -> list[User]:
        ...

    def upsert_user(self, user: User) -> User:
        ...

    # Groups

    def get_group(self, group_id: str) -> Optional[Group]:
        ...

    def list_groups(self, group_ids: Iterable[str]) -> list[Group]:
        """Return the groups with the given IDs, newest first."""
        ...

    def insert_group(self, group: Group, owner: GroupMember) -> Group:
        """Insert a group together with its owner's membership."""
        ...

    def delete_group(self, group_id: str) -> bool:
        """
        Delete a group and everything that hangs off it (memberships,
        invites, requests). Returns False if the group did not exist.
        """
        ...

    def count_groups_created(self, user_id: str) -> int:
        ...

    # Members

    def get_member(self, group_id: str, user_id: str) -> Optional[GroupMember]:
        ...

    def list_members(self, group_id: str) -> list[GroupMember]:
        ...

    def list_memberships(self, user_id: str) -> list[GroupMember]:
        ...

    def count_members(self, group_id: str) -> int:
        ...

    def count_memberships(self, user_id: str) -> int:
        ...

    def insert_member(self, member: GroupMember, capacity: int) -> bool:
        """
        Add a membership unless the pair already exists or the group
        already has `capacity` members. Returns whether the row was added.
        """
        ...

    def delete_member(self, group_id: str, user_id: str) -> bool:
        ...

    # Requests

    def get_request(self, request_id: str) -> Optional[HelpRequest]:
        ...

    def insert_request(self, request: HelpRequest) -> Optional[HelpRequest]:
        """Insert a request, or return None if its group no longer exists."""
        ...

    def list_requests(
        self,
        group_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[HelpRequest]:
        """Return requests matching the filters, newest created first."""
        ...

    def count_open_requests(self, user_id: str) -> int:
        ...

    def update_request(
        self,
        request_id: str,
        changes: dict[str, Any],
        expected_status: RequestStatus,
        expected_claimed_by: Optional[str] = None,
    ) -> Optional[HelpRequest]:
        """
        Apply `changes` only if the request currently has `expected_status`
        (and, when given, `expected_claimed_by`).

        Returns:
            The updated request, or None if it is missing or the
            condition did not hold.
        """
        ...

    def delete_request(
        self,
        request_id: str,
        allowed_statuses: Iterable[RequestStatus],
    ) -> bool:
        """Delete the request only if its status is one of `allowed_statuses`."""
        ...

    def list_overdue_requests(self, now: datetime) -> list[HelpRequest]:
        """Open requests whose needed_by is earlier than `now`."""
        ...

    # Invites

    def get_invite_by_token(self, token: str) -> Optional[Invite]:
        ...

    def insert_invite(self, invite: Invite) -> Invite:
        ...

    def list_invites(
        self,
        group_ids: Optional[Iterable[str]] = None,
        email: Optional[str] = None,
    ) -> list[Invite]:
        """Return invites matching the filters, newest first."""
        ...

    def mark_invite_used(self, invite_id: str, used_at: datetime) -> bool:
        """Set used_at only if the invite is still unused."""
        ...

    def delete_expired_invites(self, now: datetime) -> int:
        """Delete unused invites that expired before `now`."""
        ...

    # Limits

    def get_limits(self, user_id: str) -> Optional[UserLimits]:
        ...

    def insert_limits(self, limits: UserLimits) -> UserLimits:
        """Insert limits if none exist yet; return whichever row is stored."""
        ...

    def update_limits(self, user_id: str, changes: dict[str, Any]) -> Optional[UserLimits]:
        ...

    # Email preferences

    def get_email_preferences(self, user_id: str) -> Optional[EmailPreferences]:
        ...

    def upsert_email_preferences(self, preferences: EmailPreferences) -> EmailPreferences:
        ...
