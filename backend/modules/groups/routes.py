"""
Group and invite API endpoints.

Guard failures raised by the service propagate as CupOfSugarError and are
turned into JSON error responses by the application's exception handler.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_group_service, get_request_service
from api.middleware.auth import get_current_member
from shared.config import get_settings
from shared.models import AuthenticatedUser
from modules.store.models import Group, HelpRequest, User
from modules.help_requests.interfaces import IRequestLifecycleService

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

router = APIRouter()
invites_router = APIRouter()


# -----------------------------------------------------------------------------
# /api/groups
# -----------------------------------------------------------------------------


@router.get("", response_model=list[Group])
async def list_groups(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> list[Group]:
    """List the groups the current user belongs to, newest first."""
    return await service.get_user_groups(user.id)


@router.post("", response_model=Group, status_code=201)
async def create_group(
    request: CreateGroupRequest,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> Group:
    """
    Create a group.

    The caller becomes its owner and first member.
    """
    return await service.create_group(user.id, request.name)


@router.get("/{group_id}/members", response_model=list[User])
async def list_group_members(
    group_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> list[User]:
    return await service.get_group_members(group_id, user.id)


@router.post("/{group_id}/leave", response_model=LeaveGroupResult)
async def leave_group(
    group_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> LeaveGroupResult:
    """
    Leave a group.

    An owner can only leave as the last member, which deletes the group.
    """
    return await service.leave_group(group_id, user.id)


@router.delete("/{group_id}/members/{user_id}", status_code=204)
async def remove_group_member(
    group_id: str,
    user_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> None:
    """Remove a member from a group. Owner only."""
    await service.remove_group_member(group_id, user.id, user_id)


@router.post("/{group_id}/invites", response_model=InviteCreated, status_code=201)
async def create_invite(
    group_id: str,
    request: CreateInviteRequest,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> InviteCreated:
    """
    Invite someone to a group by email. Owner only.

    Returns the invite and the link the invitee follows to join.
    """
    invite = await service.create_invite(group_id, user.id, request.email)
    invite_url = f"{get_settings().frontend_url.rstrip('/')}/join/{invite.token}"
    return InviteCreated(invite=invite, invite_url=invite_url)


@router.get("/{group_id}/requests", response_model=list[HelpRequest])
async def list_group_requests(
    group_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> list[HelpRequest]:
    """List a group's requests, newest first. Members only."""
    return await service.get_group_requests(group_id, user.id)


# -----------------------------------------------------------------------------
# /api/invites
# -----------------------------------------------------------------------------
# Fixed paths are registered before /{token} so they are not captured by it.


@invites_router.get("/pending", response_model=list[PendingInvitation])
async def list_pending_invitations(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> list[PendingInvitation]:
    """Invites addressed to the current user's email that can still be accepted."""
    return await service.get_pending_invitations(user.email)


@invites_router.get("/outgoing", response_model=list[PendingOutgoingInvitation])
async def list_outgoing_invitations(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> list[PendingOutgoingInvitation]:
    """Unredeemed invites for groups the current user owns."""
    return await service.get_pending_outgoing_invitations(user.id)


@invites_router.get("/count", response_model=InvitationCount)
async def get_invitation_count(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> InvitationCount:
    return await service.get_invitation_count(user.id)


@invites_router.get("/{token}", response_model=InviteValidation)
async def validate_invite(
    token: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> InviteValidation:
    """Look up the group an invite token opens, without redeeming it."""
    return await service.validate_invite(token)


@invites_router.post("/{token}/join", response_model=Group)
async def join_group(
    token: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> Group:
    """Redeem an invite link."""
    return await service.join_group(token, user.id)


@invites_router.post("/{token}/accept", response_model=Group)
async def accept_invitation(
    token: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> Group:
    """Accept an invite addressed to the current user's email."""
    return await service.accept_invitation(token, user.id, user.email)


@invites_router.post("/{token}/decline", status_code=204)
async def decline_invitation(
    token: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IGroupService = Depends(get_group_service),
) -> None:
    """Decline an invite addressed to the current user's email."""
    await service.decline_invitation(token, user.id, user.email)
