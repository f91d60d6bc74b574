"""
Groups module exceptions.
"""

from shared.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)


class GroupNotFoundError(NotFoundError):
    """Raised when a group does not exist."""

    def __init__(self, group_id: str):
        super().__init__(
            "Group not found",
            code="GROUP_NOT_FOUND",
            details={"group_id": group_id},
        )


class GroupNameRequiredError(ValidationError):
    """Raised when a group name is empty."""

    def __init__(self):
        super().__init__("Group name is required", code="GROUP_NAME_REQUIRED")


class InvalidGroupNameError(ValidationError):
    """Raised when a group name is nothing but markup."""

    def __init__(self):
        super().__init__(
            "Group name contains invalid characters",
            code="GROUP_NAME_INVALID",
        )


class InvalidInviteEmailError(ValidationError):
    """Raised when an invite is addressed to a malformed email."""

    def __init__(self, email: str):
        super().__init__(
            "Invalid email format",
            code="INVALID_EMAIL",
            details={"email": email},
        )


class NotGroupOwnerError(AuthorizationError):
    """Raised when an owner-only action is attempted by someone else."""

    def __init__(self, group_id: str, user_id: str, message: str):
        super().__init__(
            message,
            code="NOT_GROUP_OWNER",
            details={"group_id": group_id, "user_id": user_id},
        )


class NotGroupMemberError(AuthorizationError):
    """Raised when a non-member tries to see a group's contents."""

    def __init__(self, group_id: str, user_id: str):
        super().__init__(
            "You are not a member of this group",
            code="NOT_GROUP_MEMBER",
            details={"group_id": group_id, "user_id": user_id},
        )


class MembershipNotFoundError(StateConflictError):
    """Raised when leaving or removing a membership that does not exist."""

    def __init__(self, group_id: str, user_id: str, message: str):
        super().__init__(
            message,
            code="NOT_A_MEMBER",
            details={"group_id": group_id, "user_id": user_id},
        )


class AlreadyMemberError(StateConflictError):
    """Raised when a user is already a member of the group."""

    def __init__(self, group_id: str, user_id: str, message: str):
        super().__init__(
            message,
            code="ALREADY_MEMBER",
            details={"group_id": group_id, "user_id": user_id},
        )


class GroupFullError(StateConflictError):
    """Raised when a group already has the maximum number of members."""

    def __init__(self, group_id: str, max_members: int):
        super().__init__(
            f"Group is full (maximum {max_members} members)",
            code="GROUP_FULL",
            details={"group_id": group_id, "max_members": max_members},
        )


class OwnerCannotLeaveError(StateConflictError):
    """Raised when an owner tries to leave a group that still has other members."""

    def __init__(self, group_id: str, member_count: int):
        super().__init__(
            "Group owner cannot leave while other members remain. "
            "Remove other members first or transfer ownership.",
            code="OWNER_CANNOT_LEAVE",
            details={"group_id": group_id, "member_count": member_count},
        )


class CannotRemoveSelfError(ValidationError):
    """Raised when an owner tries to remove themselves instead of leaving."""

    def __init__(self, group_id: str):
        super().__init__(
            "Use leave group functionality to leave the group",
            code="CANNOT_REMOVE_SELF",
            details={"group_id": group_id},
        )


class InviteInvalidError(NotFoundError):
    """
    Raised for any invite that cannot be redeemed.

    Unknown, used, expired and orphaned tokens all look the same, so the
    response says nothing about the state of a token.
    """

    def __init__(self):
        super().__init__("Invalid or expired invite token", code="INVITE_INVALID")


class InviteAlreadyUsedError(StateConflictError):
    """Raised when the invitee accepts or declines an invite twice."""

    def __init__(self, invite_id: str):
        super().__init__(
            "Invitation has already been used",
            code="INVITE_USED",
            details={"invite_id": invite_id},
        )


class InviteEmailMismatchError(AuthorizationError):
    """Raised when an invite addressed to someone else is accepted or declined."""

    def __init__(self, invite_id: str):
        super().__init__(
            "Invitation is not for your email address",
            code="INVITE_EMAIL_MISMATCH",
            details={"invite_id": invite_id},
        )
