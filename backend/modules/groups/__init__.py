"""
Groups module.

Handles groups, invites and membership changes.

Public API:
- IGroupService: Interface for group membership operations
- GroupService: Store-backed implementation
- LeaveGroupResult, InviteValidation: Operation results
"""

from .interfaces import IGroupService
from .models import (
    CreateGroupRequest,
    CreateInviteRequest,
    InvitationCount,
    InviteCreated,
    InviteValidation,
    LeaveGroupResult,
    PendingInvitation,
    PendingOutgoingInvitation,
)
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
from .service import GroupService, get_group_service, reset_group_service

__all__ = [
    # Interface
    "IGroupService",
    # Models
    "CreateGroupRequest",
    "CreateInviteRequest",
    "InvitationCount",
    "InviteCreated",
    "InviteValidation",
    "LeaveGroupResult",
    "PendingInvitation",
    "PendingOutgoingInvitation",
    # Exceptions
    "AlreadyMemberError",
    "CannotRemoveSelfError",
    "GroupFullError",
    "GroupNameRequiredError",
    "GroupNotFoundError",
    "InvalidGroupNameError",
    "InvalidInviteEmailError",
    "InviteAlreadyUsedError",
    "InviteEmailMismatchError",
    "InviteInvalidError",
    "MembershipNotFoundError",
    "NotGroupMemberError",
    "NotGroupOwnerError",
    "OwnerCannotLeaveError",
    # Service
    "GroupService",
    "get_group_service",
    "reset_group_service",
]
