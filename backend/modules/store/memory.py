"""
In-memory membership store.

For tests and single-process development. Every method runs under one
re-entrant lock, so each call (including the conditional writes) is atomic
with respect to every other call. Records are copied on the way in and on
the way out, so callers can never observe or cause a half-applied update.
"""

import itertools
import threading
import uuid
from datetime import datetime
from typing import Any, Iterable, Optional

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


class InMemoryStore:
    """Dictionary-backed implementation of IMembershipStore."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sequence = itertools.count()
        self._order: dict[str, int] = {}

        self._users: dict[str, User] = {}
        self._groups: dict[str, Group] = {}
        self._members: dict[tuple[str, str], GroupMember] = {}
        self._requests: dict[str, HelpRequest] = {}
        self._invites: dict[str, Invite] = {}
        self._limits: dict[str, UserLimits] = {}
        self._email_preferences: dict[str, EmailPreferences] = {}

    def generate_id(self) -> str:
        return str(uuid.uuid4())

    def _newest_first(self, records: Iterable[Any]) -> list[Any]:
        # Insertion order breaks ties between identical created_at values
        return sorted(
            (r.model_copy() for r in records),
            key=lambda r: (r.created_at, self._order.get(r.id, 0)),
            reverse=True,
        )

    def _remember_order(self, record_id: str) -> None:
        self._order[record_id] = next(self._sequence)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email.lower() == wanted:
                    return user.model_copy()
            return None

    def list_users(self, user_ids: Iterable[str]) -> list[User]:
        wanted = set(user_ids)
        with self._lock:
            return [u.model_copy() for u in self._users.values() if u.id in wanted]

    def upsert_user(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user.model_copy()
            return user.model_copy()

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    def get_group(self, group_id: str) -> Optional[Group]:
        with self._lock:
            group = self._groups.get(group_id)
            return group.model_copy() if group else None

    def list_groups(self, group_ids: Iterable[str]) -> list[Group]:
        wanted = set(group_ids)
        with self._lock:
            return self._newest_first(
                g for g in self._groups.values() if g.id in wanted
            )

    def insert_group(self, group: Group, owner: GroupMember) -> Group:
        with self._lock:
            self._groups[group.id] = group.model_copy()
            self._remember_order(group.id)
            self._members[(owner.group_id, owner.user_id)] = owner.model_copy()
            return group.model_copy()

    def delete_group(self, group_id: str) -> bool:
        with self._lock:
            if self._groups.pop(group_id, None) is None:
                return False
            for key in [k for k in self._members if k[0] == group_id]:
                del self._members[key]
            for invite_id in [i.id for i in self._invites.values() if i.group_id == group_id]:
                del self._invites[invite_id]
            for request_id in [r.id for r in self._requests.values() if r.group_id == group_id]:
                del self._requests[request_id]
            return True

    def count_groups_created(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for g in self._groups.values() if g.created_by == user_id)

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    def get_member(self, group_id: str, user_id: str) -> Optional[GroupMember]:
        with self._lock:
            member = self._members.get((group_id, user_id))
            return member.model_copy() if member else None

    def list_members(self, group_id: str) -> list[GroupMember]:
        with self._lock:
            return [m.model_copy() for m in self._members.values() if m.group_id == group_id]

    def list_memberships(self, user_id: str) -> list[GroupMember]:
        with self._lock:
            return [m.model_copy() for m in self._members.values() if m.user_id == user_id]

    def count_members(self, group_id: str) -> int:
        with self._lock:
            return sum(1 for m in self._members.values() if m.group_id == group_id)

    def count_memberships(self, user_id: str) -> int:
        with self._lock:
            return sum(1 for m in self._members.values() if m.user_id == user_id)

    def insert_member(self, member: GroupMember, capacity: int) -> bool:
        key = (member.group_id, member.user_id)
        with self._lock:
            if member.group_id not in self._groups or key in self._members:
                return False
            if self.count_members(member.group_id) >= capacity:
                return False
            self._members[key] = member.model_copy()
            return True

    def delete_member(self, group_id: str, user_id: str) -> bool:
        with self._lock:
            return self._members.pop((group_id, user_id), None) is not None

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def get_request(self, request_id: str) -> Optional[HelpRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            return request.model_copy() if request else None

    def insert_request(self, request: HelpRequest) -> Optional[HelpRequest]:
        with self._lock:
            if request.group_id not in self._groups:
                return None
            self._requests[request.id] = request.model_copy()
            self._remember_order(request.id)
            return request.model_copy()

    def list_requests(
        self,
        group_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> list[HelpRequest]:
        with self._lock:
            return self._newest_first(
                r
                for r in self._requests.values()
                if (group_id is None or r.group_id == group_id)
                and (user_id is None or r.user_id == user_id)
            )

    def count_open_requests(self, user_id: str) -> int:
        with self._lock:
            return sum(
                1
                for r in self._requests.values()
                if r.user_id == user_id and r.status == RequestStatus.OPEN
            )

    def update_request(
        self,
        request_id: str,
        changes: dict[str, Any],
        expected_status: RequestStatus,
        expected_claimed_by: Optional[str] = None,
    ) -> Optional[HelpRequest]:
        with self._lock:
            current = self._requests.get(request_id)
            if current is None or current.status != expected_status:
                return None
            if expected_claimed_by is not None and current.claimed_by != expected_claimed_by:
                return None
            # Validate the merged record before it replaces the stored one
            updated = HelpRequest.model_validate({**current.model_dump(), **changes})
            self._requests[request_id] = updated
            return updated.model_copy()

    def delete_request(
        self,
        request_id: str,
        allowed_statuses: Iterable[RequestStatus],
    ) -> bool:
        allowed = set(allowed_statuses)
        with self._lock:
            current = self._requests.get(request_id)
            if current is None or current.status not in allowed:
                return False
            del self._requests[request_id]
            return True

    def list_overdue_requests(self, now: datetime) -> list[HelpRequest]:
        with self._lock:
            return self._newest_first(
                r
                for r in self._requests.values()
                if r.status == RequestStatus.OPEN and r.needed_by < now
            )

    # -------------------------------------------------------------------------
    # Invites
    # -------------------------------------------------------------------------

    def get_invite_by_token(self, token: str) -> Optional[Invite]:
        with self._lock:
            for invite in self._invites.values():
                if invite.token == token:
                    return invite.model_copy()
            return None

    def insert_invite(self, invite: Invite) -> Invite:
        with self._lock:
            self._invites[invite.id] = invite.model_copy()
            self._remember_order(invite.id)
            return invite.model_copy()

    def list_invites(
        self,
        group_ids: Optional[Iterable[str]] = None,
        email: Optional[str] = None,
    ) -> list[Invite]:
        wanted_groups = set(group_ids) if group_ids is not None else None
        wanted_email = email.strip().lower() if email is not None else None
        with self._lock:
            return self._newest_first(
                i
                for i in self._invites.values()
                if (wanted_groups is None or i.group_id in wanted_groups)
                and (wanted_email is None or i.email.lower() == wanted_email)
            )

    def mark_invite_used(self, invite_id: str, used_at: datetime) -> bool:
        with self._lock:
            invite = self._invites.get(invite_id)
            if invite is None or invite.used_at is not None:
                return False
            self._invites[invite_id] = invite.model_copy(update={"used_at": used_at})
            return True

    def delete_expired_invites(self, now: datetime) -> int:
        with self._lock:
            expired = [
                i.id
                for i in self._invites.values()
                if i.used_at is None and i.expires_at < now
            ]
            for invite_id in expired:
                del self._invites[invite_id]
            return len(expired)

    # -------------------------------------------------------------------------
    # Limits
    # -------------------------------------------------------------------------

    def get_limits(self, user_id: str) -> Optional[UserLimits]:
        with self._lock:
            limits = self._limits.get(user_id)
            return limits.model_copy() if limits else None

    def insert_limits(self, limits: UserLimits) -> UserLimits:
        with self._lock:
            stored = self._limits.setdefault(limits.user_id, limits.model_copy())
            return stored.model_copy()

    def update_limits(self, user_id: str, changes: dict[str, Any]) -> Optional[UserLimits]:
        with self._lock:
            current = self._limits.get(user_id)
            if current is None:
                return None
            updated = UserLimits.model_validate({**current.model_dump(), **changes})
            self._limits[user_id] = updated
            return updated.model_copy()

    # -------------------------------------------------------------------------
    # Email preferences
    # -------------------------------------------------------------------------

    def get_email_preferences(self, user_id: str) -> Optional[EmailPreferences]:
        with self._lock:
            preferences = self._email_preferences.get(user_id)
            return preferences.model_copy() if preferences else None

    def upsert_email_preferences(self, preferences: EmailPreferences) -> EmailPreferences:
        with self._lock:
            self._email_preferences[preferences.user_id] = preferences.model_copy()
            return preferences.model_copy()
