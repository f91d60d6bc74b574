"""
Group membership service.

Check-then-write sequences on one group run under that group's key in a
process-local KeyedLock. Across processes, the store's capacity-guarded
insert and the single-use invite update keep the invariants intact; when
the second of two writes fails, the first is compensated.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from shared.config import Settings, get_settings
from shared.locks import KeyedLock
from shared.validation import (
    generate_token,
    normalize_email,
    sanitize_input,
    validate_email,
)
from modules.store.interfaces import IMembershipStore
from modules.store.models import Group, GroupMember, Invite, User, utc_now
from modules.quotas.interfaces import IQuotaService

from .exceptions import (
    AlreadyMemberError,
    CannotRemoveSelfError,
    GroupFullError,
    GroupNameRequiredError,
    GroupNotFoundError,
    InvalidGroupNameError,
    InvalidInviteEmailError,
    InviteAlreadyUsedError,
    InviteEmailMismatchError,
    InviteInvalidError,
    MembershipNotFoundError,
    NotGroupMemberError,
    NotGroupOwnerError,
    OwnerCannotLeaveError,
)
from .interfaces import IGroupService
from .models import (
    InvitationCount,
    InviteValidation,
    LeaveGroupResult,
    PendingInvitation,
    PendingOutgoingInvitation,
)

logger = logging.getLogger(__name__)


def _group_key(group_id: str) -> str:
    return f"group:{group_id}"


def _user_key(user_id: str) -> str:
    return f"user:{user_id}"


class GroupService(IGroupService):
    """
    Implements IGroupService over any IMembershipStore.
    """

    def __init__(
        self,
        store: IMembershipStore,
        quotas: IQuotaService,
        settings: Optional[Settings] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self._store = store
        self._quotas = quotas
        self._settings = settings or get_settings()
        self._locks = locks or KeyedLock()

    @property
    def max_members(self) -> int:
        return self._settings.max_group_members

    def _require_group(self, group_id: str) -> Group:
        group = self._store.get_group(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return group

    # -------------------------------------------------------------------------
    # Groups
    # -------------------------------------------------------------------------

    async def create_group(self, owner_id: str, name: str) -> Group:
        async with self._locks.hold(_user_key(owner_id)):
            await self._quotas.ensure_can_create_group(owner_id)

            if not name or not name.strip():
                raise GroupNameRequiredError()
            cleaned = sanitize_input(name)
            if not cleaned:
                raise InvalidGroupNameError()

            now = utc_now()
            group = Group(
                id=self._store.generate_id(),
                name=cleaned,
                created_by=owner_id,
                created_at=now,
            )
            owner = GroupMember(group_id=group.id, user_id=owner_id, joined_at=now)
            created = self._store.insert_group(group, owner)

        logger.info(f"Group {created.id} created by {owner_id}")
        return created

    async def get_user_groups(self, user_id: str) -> list[Group]:
        memberships = self._store.list_memberships(user_id)
        return self._store.list_groups(m.group_id for m in memberships)

    async def get_group_members(self, group_id: str, user_id: str) -> list[User]:
        self._require_group(group_id)
        if self._store.get_member(group_id, user_id) is None:
            raise NotGroupMemberError(group_id, user_id)

        members = sorted(self._store.list_members(group_id), key=lambda m: m.joined_at)
        users = {u.id: u for u in self._store.list_users(m.user_id for m in members)}
        return [users[m.user_id] for m in members if m.user_id in users]

    async def leave_group(self, group_id: str, user_id: str) -> LeaveGroupResult:
        async with self._locks.hold(_group_key(group_id)):
            group = self._require_group(group_id)
            if self._store.get_member(group_id, user_id) is None:
                raise MembershipNotFoundError(
                    group_id, user_id, "You are not a member of this group"
                )

            member_count = self._store.count_members(group_id)
            if group.created_by == user_id:
                if member_count > 1:
                    raise OwnerCannotLeaveError(group_id, member_count)
                self._store.delete_group(group_id)
                logger.info(f"Group {group_id} deleted after its owner left")
                return LeaveGroupResult(group_id=group_id, group_deleted=True)

            self._store.delete_member(group_id, user_id)

        logger.info(f"User {user_id} left group {group_id}")
        return LeaveGroupResult(group_id=group_id, group_deleted=False)

    async def remove_group_member(
        self,
        group_id: str,
        owner_id: str,
        target_user_id: str,
    ) -> None:
        async with self._locks.hold(_group_key(group_id)):
            group = self._require_group(group_id)
            if group.created_by != owner_id:
                raise NotGroupOwnerError(
                    group_id, owner_id, "Only group owners can remove members"
                )
            if target_user_id == owner_id:
                raise CannotRemoveSelfError(group_id)
            if not self._store.delete_member(group_id, target_user_id):
                raise MembershipNotFoundError(
                    group_id, target_user_id, "User is not a member of this group"
                )

        logger.info(f"User {target_user_id} removed from group {group_id} by {owner_id}")

    # -------------------------------------------------------------------------
    # Invites
    # -------------------------------------------------------------------------

    async def create_invite(self, group_id: str, inviter_id: str, email: str) -> Invite:
        group = self._require_group(group_id)
        if group.created_by != inviter_id:
            raise NotGroupOwnerError(
                group_id, inviter_id, "Only group creators can send invites"
            )
        if not email or not validate_email(email.strip()):
            raise InvalidInviteEmailError(email)

        address = normalize_email(email)
        invitee = self._store.get_user_by_email(address)
        if invitee is not None and self._store.get_member(group_id, invitee.id):
            raise AlreadyMemberError(
                group_id, invitee.id, "User is already a member of this group"
            )

        now = utc_now()
        invite = self._store.insert_invite(
            Invite(
                id=self._store.generate_id(),
                group_id=group_id,
                email=address,
                token=generate_token(),
                expires_at=now + timedelta(days=self._settings.invite_ttl_days),
                created_at=now,
            )
        )
        logger.info(f"Invite {invite.id} created for group {group_id}")
        return invite

    async def validate_invite(self, token: str) -> InviteValidation:
        invite = self._store.get_invite_by_token(token)
        if invite is None or not invite.is_redeemable(utc_now()):
            raise InviteInvalidError()
        group = self._store.get_group(invite.group_id)
        if group is None:
            raise InviteInvalidError()
        return InviteValidation(group=group, invite=invite)

    async def join_group(self, token: str, user_id: str) -> Group:
        await self._quotas.ensure_can_join_group(user_id)
        validation = await self.validate_invite(token)

        group_id = validation.group.id
        async with self._locks.hold(_group_key(group_id), _user_key(user_id)):
            # Re-check under the lock; another join may have landed meanwhile
            await self._quotas.ensure_can_join_group(user_id)
            validation = await self.validate_invite(token)
            return self._redeem(validation, user_id)

    async def accept_invitation(self, token: str, user_id: str, email: str) -> Group:
        invite = self._load_addressed_invite(token, email)

        async with self._locks.hold(_group_key(invite.group_id), _user_key(user_id)):
            await self._quotas.ensure_can_join_group(user_id)
            validation = await self.validate_invite(token)
            return self._redeem(validation, user_id)

    async def decline_invitation(self, token: str, user_id: str, email: str) -> None:
        invite = self._load_addressed_invite(token, email)
        if not self._store.mark_invite_used(invite.id, utc_now()):
            raise InviteAlreadyUsedError(invite.id)
        logger.info(f"Invite {invite.id} declined by {user_id}")

    def _load_addressed_invite(self, token: str, email: str) -> Invite:
        # Unknown, spent and expired tokens look the same to the caller
        invite = self._store.get_invite_by_token(token)
        if invite is None or not invite.is_redeemable(utc_now()):
            raise InviteInvalidError()
        if normalize_email(invite.email) != normalize_email(email):
            raise InviteEmailMismatchError(invite.id)
        return invite

    def _redeem(self, validation: InviteValidation, user_id: str) -> Group:
        """Add the membership and spend the invite. Caller holds the group lock."""
        group, invite = validation.group, validation.invite

        if self._store.get_member(group.id, user_id) is not None:
            raise AlreadyMemberError(
                group.id, user_id, "You are already a member of this group"
            )
        if self._store.count_members(group.id) >= self.max_members:
            raise GroupFullError(group.id, self.max_members)

        member = GroupMember(group_id=group.id, user_id=user_id, joined_at=utc_now())
        if not self._store.insert_member(member, self.max_members):
            # Lost a race with a writer in another process
            if self._store.get_member(group.id, user_id) is not None:
                raise AlreadyMemberError(
                    group.id, user_id, "You are already a member of this group"
                )
            raise GroupFullError(group.id, self.max_members)

        if not self._store.mark_invite_used(invite.id, utc_now()):
            logger.warning(
                f"Invite {invite.id} was spent concurrently, rolling back membership "
                f"of {user_id} in group {group.id}"
            )
            self._store.delete_member(group.id, user_id)
            raise InviteInvalidError()

        logger.info(f"User {user_id} joined group {group.id} with invite {invite.id}")
        return group

    async def get_pending_invitations(self, email: str) -> list[PendingInvitation]:
        now = utc_now()
        invites = [
            i for i in self._store.list_invites(email=normalize_email(email))
            if i.is_redeemable(now)
        ]
        groups = {g.id: g for g in self._store.list_groups(i.group_id for i in invites)}
        owners = {
            u.id: u for u in self._store.list_users(g.created_by for g in groups.values())
        }

        pending = []
        for invite in invites:
            group = groups.get(invite.group_id)
            if group is None:
                continue
            inviter = owners.get(group.created_by)
            if inviter is None:
                continue
            pending.append(
                PendingInvitation(
                    id=invite.id,
                    group_id=group.id,
                    group_name=group.name,
                    inviter_name=inviter.name,
                    email=invite.email,
                    token=invite.token,
                    expires_at=invite.expires_at,
                    created_at=invite.created_at,
                )
            )
        return pending

    async def get_pending_outgoing_invitations(
        self, user_id: str
    ) -> list[PendingOutgoingInvitation]:
        now = utc_now()
        owned = {g.id: g for g in await self.get_user_groups(user_id) if g.created_by == user_id}
        return [
            PendingOutgoingInvitation(
                id=invite.id,
                group_id=invite.group_id,
                group_name=owned[invite.group_id].name,
                email=invite.email,
                expires_at=invite.expires_at,
                created_at=invite.created_at,
                used_at=invite.used_at,
            )
            for invite in self._store.list_invites(group_ids=owned.keys())
            if invite.is_redeemable(now)
        ]

    async def get_invitation_count(self, user_id: str) -> InvitationCount:
        outgoing = await self.get_pending_outgoing_invitations(user_id)
        return InvitationCount(
            current=len(outgoing),
            max=self._settings.max_pending_invitations,
        )

    async def cleanup_expired_invites(self, now: Optional[datetime] = None) -> int:
        removed = self._store.delete_expired_invites(now or utc_now())
        if removed:
            logger.info(f"Deleted {removed} expired invites")
        return removed


# Module-level instance getter
_service_instance: Optional[GroupService] = None


def get_group_service() -> GroupService:
    """Get the group service singleton."""
    global _service_instance
    if _service_instance is None:
        from modules.store.factory import get_membership_store
        from modules.quotas.service import get_quota_service
        _service_instance = GroupService(get_membership_store(), get_quota_service())
    return _service_instance


def reset_group_service() -> None:
    """Reset the group service singleton (for testing)."""
    global _service_instance
    _service_instance = None
