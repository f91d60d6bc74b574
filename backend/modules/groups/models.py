"""
Groups module data models.

Group, GroupMember and Invite records live in modules.store; this module
adds the request bodies and the read models built from them.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from modules.store.models import Group, Invite


class CreateGroupRequest(BaseModel):
    """Request body for creating a group."""

    name: str = Field(..., max_length=200, description="Group name")


class CreateInviteRequest(BaseModel):
    """
    Request body for inviting someone to a group.

    The address is checked by the service so that a malformed email is
    reported with the same error shape as every other guard failure.
    """

    email: str = Field(..., max_length=320, description="Invitee email address")


class InviteValidation(BaseModel):
    """A redeemable invite together with the group it opens."""

    group: Group
    invite: Invite


class InviteCreated(BaseModel):
    """Response for a newly created invite, including the shareable link."""

    invite: Invite
    invite_url: str


class LeaveGroupResult(BaseModel):
    """Outcome of leaving a group."""

    group_id: str
    group_deleted: bool = Field(
        default=False,
        description="True when the owner left as the last member",
    )


class PendingInvitation(BaseModel):
    """An unused, unexpired invite addressed to the caller."""

    id: str
    group_id: str
    group_name: str
    inviter_name: str
    email: str
    token: str
    expires_at: datetime
    created_at: datetime


class PendingOutgoingInvitation(BaseModel):
    """An unused, unexpired invite sent for a group the caller owns."""

    id: str
    group_id: str
    group_name: str
    email: str
    expires_at: datetime
    created_at: datetime
    used_at: Optional[datetime] = None


class InvitationCount(BaseModel):
    """Pending outgoing invites against the advisory ceiling."""

    current: int
    max: int
