"""
Help request API endpoints.

Provides REST endpoints for posting requests and moving them through
their lifecycle. A group's request list is served from the groups routes.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_request_service
from api.middleware.auth import get_current_member
from shared.models import AuthenticatedUser
from modules.store.models import HelpRequest

from .interfaces import IRequestLifecycleService
from .models import CreateHelpRequest

router = APIRouter()


@router.post("", response_model=HelpRequest, status_code=201)
async def create_request(
    request: CreateHelpRequest,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> HelpRequest:
    """
    Post a new request to one of the caller's groups.

    Members of the group who asked for immediate email are notified.
    """
    return await service.create_request(user.id, request)


@router.get("", response_model=list[HelpRequest])
async def list_my_requests(
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> list[HelpRequest]:
    """List the requests the current user created, newest first."""
    return await service.get_user_requests(user.id)


@router.get("/{request_id}", response_model=HelpRequest)
async def get_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> HelpRequest:
    return await service.get_request(request_id, user.id)


@router.post("/{request_id}/claim", response_model=HelpRequest)
async def claim_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> HelpRequest:
    """
    Claim an open request.

    Returns 409 if someone else claimed it first.
    """
    return await service.claim_request(request_id, user.id)


@router.post("/{request_id}/unclaim", response_model=HelpRequest)
async def unclaim_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> HelpRequest:
    """Give a claimed request back to the group."""
    return await service.unclaim_request(request_id, user.id)


@router.post("/{request_id}/fulfill", response_model=HelpRequest)
async def fulfill_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> HelpRequest:
    """Mark a request the caller claimed as fulfilled."""
    return await service.fulfill_request(request_id, user.id)


@router.delete("/{request_id}", status_code=204)
async def delete_request(
    request_id: str,
    user: AuthenticatedUser = Depends(get_current_member),
    service: IRequestLifecycleService = Depends(get_request_service),
) -> None:
    """
    Delete one of the caller's requests.

    Fulfilled requests are kept as a record and cannot be deleted.
    """
    await service.delete_request(request_id, user.id)
