"""
Groups module interface.

The API layer depends on IGroupService for everything about group
membership: creating groups, inviting, joining, leaving and removing.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from modules.store.models import Group, Invite, User
from .models import (
    InvitationCount,
    InviteValidation,
    LeaveGroupResult,
    PendingInvitation,
    PendingOutgoingInvitation,
)


@runtime_checkable
class IGroupService(Protocol):
    """
    Interface for group membership operations.

    Every operation takes the caller's identity explicitly. Operations are
    all-or-nothing: a rejected call leaves no writes behind.
    """

    async def create_group(self, owner_id: str, name: str) -> Group:
        """
        Create a group owned by `owner_id`, with the owner as its first member.

        Raises:
            GroupsCreatedLimitError: If the owner already has too many groups
            GroupNameRequiredError: If the name is blank
            InvalidGroupNameError: If the name is nothing but markup
        """
        ...

    async def create_invite(self, group_id: str, inviter_id: str, email: str) -> Invite:
        """
        Create a single-use invite to the group.

        Raises:
            GroupNotFoundError: If the group does not exist
            NotGroupOwnerError: If the inviter is not the owner
            InvalidInviteEmailError: If the email is malformed
            AlreadyMemberError: If a user with that email is already a member
        """
        ...

    async def validate_invite(self, token: str) -> InviteValidation:
        """
        Resolve a token to its invite and group.

        Raises:
            InviteInvalidError: If the token is unknown, used, expired, or
                its group no longer exists
        """
        ...

    async def join_group(self, token: str, user_id: str) -> Group:
        """
        Redeem an invite token.

        Raises:
            GroupsJoinedLimitError: If the user is in too many groups
            InviteInvalidError: If the token cannot be redeemed
            AlreadyMemberError: If the user is already a member
            GroupFullError: If the group is at capacity
        """
        ...

    async def leave_group(self, group_id: str, user_id: str) -> LeaveGroupResult:
        """
        Leave a group. The owner may only leave as the last member, which
        deletes the group with its invites and requests.

        Raises:
            GroupNotFoundError: If the group does not exist
            MembershipNotFoundError: If the user is not a member
            OwnerCannotLeaveError: If the owner leaves while others remain
        """
        ...

    async def remove_group_member(
        self,
        group_id: str,
        owner_id: str,
        target_user_id: str,
    ) -> None:
        """
        Remove another member from a group (owner only).

        Raises:
            GroupNotFoundError: If the group does not exist
            NotGroupOwnerError: If the caller is not the owner
            CannotRemoveSelfError: If the owner targets themselves
            MembershipNotFoundError: If the target is not a member
        """
        ...

    async def get_user_groups(self, user_id: str) -> list[Group]:
        """Groups the user belongs to, newest first."""
        ...

    async def get_group_members(self, group_id: str, user_id: str) -> list[User]:
        """Profiles of a group's members. The caller must be a member."""
        ...

    async def accept_invitation(self, token: str, user_id: str, email: str) -> Group:
        """Join via an invite addressed to the caller's email."""
        ...

    async def decline_invitation(self, token: str, user_id: str, email: str) -> None:
        """Spend an invite addressed to the caller without joining."""
        ...

    async def get_pending_invitations(self, email: str) -> list[PendingInvitation]:
        ...

    async def get_pending_outgoing_invitations(
        self, user_id: str
    ) -> list[PendingOutgoingInvitation]:
        ...

    async def get_invitation_count(self, user_id: str) -> InvitationCount:
        ...

    async def cleanup_expired_invites(self, now: Optional[datetime] = None) -> int:
        """Delete unused invites past their expiry. Returns how many were removed."""
        ...
