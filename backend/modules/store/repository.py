"""
Supabase-backed membership store.

Encapsulates all PostgREST queries for the tables:
- users
- groups
- group_members
- requests
- invites
- user_limits
- user_email_preferences

Conditional writes are expressed as filtered UPDATE/DELETE statements
(e.g. ``UPDATE requests ... WHERE id = ? AND status = 'open'``) so that
Postgres row locking serializes competing writers. An empty result means
the condition did not hold.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

from postgrest.exceptions import APIError

from shared.repository import BaseRepository
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

logger = logging.getLogger(__name__)

# Postgres SQLSTATEs
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class SupabaseStore(BaseRepository[HelpRequest]):
    """
    Implementation of IMembershipStore over Supabase.

    Note: This store does NOT perform authorization checks.
    The service layer is responsible for ownership and membership rules.
    """

    def generate_id(self) -> str:
        return str(uuid.uuid4())

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        """
        Get a user profile by ID.

        Args:
            user_id: The user's ID (the JWT subject).

        Returns:
            User, or None if no profile exists yet.
        """
        result = self._db.table("users").select("*").eq("id", user_id).execute()
        row = self._first(result.data)
        return User.model_validate(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Get a user profile by email address.

        Args:
            email: Address to look up. Compared lowercased and trimmed.

        Returns:
            User, or None if nobody has that address.
        """
        result = (
            self._db.table("users")
            .select("*")
            .eq("email", email.strip().lower())
            .limit(1)
            .execute()
        )
        row = self._first(result.data)
        return User.model_validate(row) if row else None

    def list_users(self, user_ids: Iterable[str]) -> list[User]:
        """Get the profiles for a set of user IDs. Unknown IDs are skipped."""
        ids = list(user_ids)
        if not ids:
            return []
        result = self._db.table("users").select("*").in_("id", ids).execute()
        return [User.model_validate(r) for r in result.data]

    def upsert_user(self, user: User) -> User:
        """
        Insert or replace a user profile.

        Args:
            user: The full profile to store.

        Returns:
            The stored User.
        """
        result = self._db.table("users").upsert(self._to_row(user)).execute()
        return User.model_validate(result.data[0])

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def get_group(self, group_id: str) -> Optional[Group]:
        """Get a group by ID, or None if it does not exist."""
        result = self._db.table("groups").select("*").eq("id", group_id).execute()
        row = self._first(result.data)
        return Group.model_validate(row) if row else None

    def list_groups(self, group_ids: Iterable[str]) -> list[Group]:
        """
        Get a set of groups, newest first.

        Args:
            group_ids: Group IDs to load. An empty set skips the query.

        Returns:
            Groups that still exist, ordered by created_at descending.
        """
        ids = list(group_ids)
        if not ids:
            return []
        result = (
            self._db.table("groups")
            .select("*")
            .in_("id", ids)
            .order("created_at", desc=True)
            .execute()
        )
        return [Group.model_validate(r) for r in result.data]

    def insert_group(self, group: Group, owner: GroupMember) -> Group:
        """
        Create a group together with its owner's membership.

        PostgREST has no multi-table transaction, so the group row is
        removed again if the owner membership cannot be written.

        Args:
            group: The new group.
            owner: Membership row for the group's creator.

        Returns:
            The created Group.

        Raises:
            APIError: If either insert fails.
        """
        result = self._db.table("groups").insert(self._to_row(group)).execute()
        try:
            self._db.table("group_members").insert(self._to_row(owner)).execute()
        except APIError:
            logger.warning(f"Owner membership insert failed, removing group {group.id}")
            self._db.table("groups").delete().eq("id", group.id).execute()
            raise
        return Group.model_validate(result.data[0])

    def delete_group(self, group_id: str) -> bool:
        """
        Delete a group and everything that belongs to it.

        Args:
            group_id: The group UUID.

        Returns:
            True if a group was deleted.
        """
        # group_members, invites and requests cascade via foreign keys
        result = self._db.table("groups").delete().eq("id", group_id).execute()
        return bool(result.data)

    def count_groups_created(self, user_id: str) -> int:
        """Number of groups the user currently owns."""
        result = (
            self._db.table("groups")
            .select("id", count="exact")
            .eq("created_by", user_id)
            .execute()
        )
        return result.count or 0

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    def get_member(self, group_id: str, user_id: str) -> Optional[GroupMember]:
        """Get one membership row, or None if the user is not in the group."""
        result = (
            self._db.table("group_members")
            .select("*")
            .eq("group_id", group_id)
            .eq("user_id", user_id)
            .execute()
        )
        row = self._first(result.data)
        return GroupMember.model_validate(row) if row else None

    def list_members(self, group_id: str) -> list[GroupMember]:
        """All membership rows of a group."""
        result = self._db.table("group_members").select("*").eq("group_id", group_id).execute()
        return [GroupMember.model_validate(r) for r in result.data]

    def list_memberships(self, user_id: str) -> list[GroupMember]:
        """All membership rows of a user."""
        result = self._db.table("group_members").select("*").eq("user_id", user_id).execute()
        return [GroupMember.model_validate(r) for r in result.data]

    def count_members(self, group_id: str) -> int:
        result = (
            self._db.table("group_members")
            .select("group_id", count="exact")
            .eq("group_id", group_id)
            .execute()
        )
        return result.count or 0

    def count_memberships(self, user_id: str) -> int:
        result = (
            self._db.table("group_members")
            .select("user_id", count="exact")
            .eq("user_id", user_id)
            .execute()
        )
        return result.count or 0

    def insert_member(self, member: GroupMember, capacity: int) -> bool:
        """
        Insert, then verify the group did not overflow.

        The unique (group_id, user_id) constraint rejects duplicates. If a
        concurrent join pushed the group past capacity, this insert is
        rolled back, so the member count can never settle above capacity.

        Args:
            member: The membership row to add.
            capacity: Maximum number of members the group may hold.

        Returns:
            True if the member was added and kept.
        """
        try:
            self._db.table("group_members").insert(self._to_row(member)).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                return False
            raise

        if self.count_members(member.group_id) > capacity:
            logger.warning(
                f"Group {member.group_id} over capacity after insert, "
                f"rolling back member {member.user_id}"
            )
            self.delete_member(member.group_id, member.user_id)
            return False
        return True

    def delete_member(self, group_id: str, user_id: str) -> bool:
        """
        Remove a membership row.

        Args:
            group_id: The group UUID.
            user_id: The member's user ID.

        Returns:
            True if a row was deleted.
        """
        result = (
            self._db.table("group_members")
            .delete()
            .eq("group_id", group_id)
            .eq("user_id", user_id)
            .execute()
        )
        return bool(result.data)

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def get_request(self, request_id: str) -> Optional[HelpRequest]:
        """Get a request by ID, or None if it does not exist."""
        result = self._db.table("requests").select("*").eq("id", request_id).execute()
        row = self._first(result.data)
        return HelpRequest.model_validate(row) if row else None

    def insert_request(self, request: HelpRequest) -> Optional[HelpRequest]:
        """
        Create a request record.

        Args:
            request: The new request, already validated and sanitized.

        Returns:
            The created HelpRequest, or None if its group has been deleted
            (the group_id foreign key rejected the row).
        """
        try:
            result = self._db.table("requests").insert(self._to_row(request)).execute()
        except APIError as e:
            if e.code == FOREIGN_KEY_VIOLATION:
                return None
            raise
        return HelpRequest.model_validate(result.data[0])

    def list_requests(
        self,
        group_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[HelpRequest]:
        """
        List requests, newest first.

        Args:
            group_id: Only requests posted in this group.
            user_id: Only requests created by this user.

        Returns:
            Matching requests ordered by created_at descending.
        """
        query = self._db.table("requests").select("*")
        if group_id is not None:
            query = query.eq("group_id", group_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        result = query.order("created_at", desc=True).execute()
        return [HelpRequest.model_validate(r) for r in result.data]

    def count_open_requests(self, user_id: str) -> int:
        """Number of the user's requests still in open status."""
        result = (
            self._db.table("requests")
            .select("id", count="exact")
            .eq("user_id", user_id)
            .eq("status", RequestStatus.OPEN.value)
            .execute()
        )
        return result.count or 0

    def update_request(
        self,
        request_id: str,
        changes: dict[str, Any],
        expected_status: RequestStatus,
        expected_claimed_by: Optional[str] = None,
    ) -> Optional[HelpRequest]:
        """
        Apply changes only if the request is still in the expected state.

        Args:
            request_id: The request UUID.
            changes: Column values to set. Enums and datetimes are serialized.
            expected_status: Status the row must have for the update to apply.
            expected_claimed_by: If given, claimer the row must have.

        Returns:
            The updated HelpRequest, or None if the condition did not hold.
        """
        payload = {
            key: value.isoformat() if isinstance(value, datetime) else getattr(value, "value", value)
            for key, value in changes.items()
        }
        query = (
            self._db.table("requests")
            .update(payload)
            .eq("id", request_id)
            .eq("status", expected_status.value)
        )
        if expected_claimed_by is not None:
            query = query.eq("claimed_by", expected_claimed_by)
        result = query.execute()
        row = self._first(result.data)
        return HelpRequest.model_validate(row) if row else None

    def delete_request(
        self,
        request_id: str,
        allowed_statuses: Iterable[RequestStatus],
    ) -> bool:
        """
        Delete a request if its status is one of allowed_statuses.

        Returns:
            True if a row was deleted.
        """
        result = (
            self._db.table("requests")
            .delete()
            .eq("id", request_id)
            .in_("status", [s.value for s in allowed_statuses])
            .execute()
        )
        return bool(result.data)

    def list_overdue_requests(self, now: datetime) -> list[HelpRequest]:
        """Open requests whose needed_by is before `now`, newest first."""
        result = (
            self._db.table("requests")
            .select("*")
            .eq("status", RequestStatus.OPEN.value)
            .lt("needed_by", now.isoformat())
            .order("created_at", desc=True)
            .execute()
        )
        return [HelpRequest.model_validate(r) for r in result.data]

    # -------------------------------------------------------------------------
    # Invites
    # -------------------------------------------------------------------------

    def get_invite_by_token(self, token: str) -> Optional[Invite]:
        """Get an invite by its secret token, or None if unknown."""
        result = self._db.table("invites").select("*").eq("token", token).execute()
        row = self._first(result.data)
        return Invite.model_validate(row) if row else None

    def insert_invite(self, invite: Invite) -> Invite:
        """
        Create an invite record.

        Args:
            invite: The new invite with its generated token.

        Returns:
            The created Invite.
        """
        result = self._db.table("invites").insert(self._to_row(invite)).execute()
        return Invite.model_validate(result.data[0])

    def list_invites(
        self,
        group_ids: Optional[Iterable[str]] = None,
        email: Optional[str] = None,
    ) -> list[Invite]:
        """
        List invites, newest first.

        Args:
            group_ids: Only invites for these groups. An empty set matches nothing.
            email: Only invites addressed to this email (case-insensitive).

        Returns:
            Matching invites ordered by created_at descending.
        """
        query = self._db.table("invites").select("*")
        if group_ids is not None:
            ids = list(group_ids)
            if not ids:
                return []
            query = query.in_("group_id", ids)
        if email is not None:
            query = query.eq("email", email.strip().lower())
        result = query.order("created_at", desc=True).execute()
        return [Invite.model_validate(r) for r in result.data]

    def mark_invite_used(self, invite_id: str, used_at: datetime) -> bool:
        """
        Spend an invite if it has not been spent yet.

        Args:
            invite_id: The invite UUID.
            used_at: Timestamp to record.

        Returns:
            True if this call spent the invite.
        """
        result = (
            self._db.table("invites")
            .update({"used_at": used_at.isoformat()})
            .eq("id", invite_id)
            .is_("used_at", "null")
            .execute()
        )
        return bool(result.data)

    def delete_expired_invites(self, now: datetime) -> int:
        """
        Delete unused invites that expired before `now`.

        Returns:
            Number of invites deleted.
        """
        result = (
            self._db.table("invites")
            .delete()
            .is_("used_at", "null")
            .lt("expires_at", now.isoformat())
            .execute()
        )
        return len(result.data or [])

    # -------------------------------------------------------------------------
    # Limits
    # -------------------------------------------------------------------------

    def get_limits(self, user_id: str) -> Optional[UserLimits]:
        """Get the stored limits for a user, or None if never materialized."""
        result = self._db.table("user_limits").select("*").eq("user_id", user_id).execute()
        row = self._first(result.data)
        return UserLimits.model_validate(row) if row else None

    def insert_limits(self, limits: UserLimits) -> UserLimits:
        """
        Store default limits unless the user already has a row.

        Args:
            limits: Defaults to write.

        Returns:
            Whatever is stored afterwards, which wins over the defaults
            when another writer got there first.
        """
        self._db.table("user_limits").upsert(
            self._to_row(limits),
            on_conflict="user_id",
            ignore_duplicates=True,
        ).execute()
        stored = self.get_limits(limits.user_id)
        return stored or limits

    def update_limits(self, user_id: str, changes: dict[str, Any]) -> Optional[UserLimits]:
        """
        Change some of a user's limits.

        Args:
            user_id: The user whose limits change.
            changes: Column values to set.

        Returns:
            The updated UserLimits, or None if the user has no row.
        """
        payload = {
            key: value.isoformat() if isinstance(value, datetime) else value
            for key, value in changes.items()
        }
        result = self._db.table("user_limits").update(payload).eq("user_id", user_id).execute()
        row = self._first(result.data)
        return UserLimits.model_validate(row) if row else None

    # -------------------------------------------------------------------------
    # Email preferences
    # -------------------------------------------------------------------------

    def get_email_preferences(self, user_id: str) -> Optional[EmailPreferences]:
        """Get a user's email preferences, or None if never saved."""
        result = (
            self._db.table("user_email_preferences")
            .select("*")
            .eq("user_id", user_id)
            .execute()
        )
        row = self._first(result.data)
        return EmailPreferences.model_validate(row) if row else None

    def upsert_email_preferences(self, preferences: EmailPreferences) -> EmailPreferences:
        """
        Insert or replace a user's email preferences.

        Args:
            preferences: The full preference record.

        Returns:
            The stored EmailPreferences.
        """
        result = (
            self._db.table("user_email_preferences")
            .upsert(self._to_row(preferences), on_conflict="user_id")
            .execute()
        )
        return EmailPreferences.model_validate(result.data[0])
