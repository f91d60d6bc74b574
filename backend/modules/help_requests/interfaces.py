"""
Help request module interface.

This is the core of the backend: the request state machine and the
guards around each transition. The API layer depends on
IRequestLifecycleService for every request operation.

States:
    open -> claimed -> fulfilled (terminal)
    claimed -> open (unclaim)
    open -> expired (expiry sweep)
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from modules.store.models import HelpRequest
from .models import CreateHelpRequest


@runtime_checkable
class IRequestLifecycleService(Protocol):
    """
    Interface for help request operations.

    Each mutating operation returns the updated request and is decided by
    a conditional write in the store, so of two racing callers exactly one
    sees success and the other gets a guard failure.
    """

    async def create_request(
        self,
        creator_id: str,
        request: CreateHelpRequest,
    ) -> HelpRequest:
        """
        Post a new open request to a group.

        Args:
            creator_id: ID of the posting user
            request: Request details

        Returns:
            The stored request, status open

        Raises:
            OpenRequestLimitError: If the creator has too many open requests
            ItemDescriptionRequiredError: If the description is blank
            NeededByInPastError: If needed_by is not in the future
            RequestGroupAccessDeniedError: If the creator is not a member
        """
        ...

    async def claim_request(self, request_id: str, claimer_id: str) -> HelpRequest:
        """
        Claim an open request.

        Raises:
            RequestNotFoundError: If the request does not exist
            RequestNotClaimableError: If it is not open, including when
                another claimer got there first
            SelfClaimError: If the claimer created the request
            RequestGroupAccessDeniedError: If the claimer is not a member
        """
        ...

    async def unclaim_request(self, request_id: str, caller_id: str) -> HelpRequest:
        """
        Release a claim, returning the request to open.

        Raises:
            RequestNotFoundError: If the request does not exist
            RequestNotClaimedError: If it is not claimed
            NotClaimerError: If the caller is not the claimer
        """
        ...

    async def fulfill_request(self, request_id: str, caller_id: str) -> HelpRequest:
        """
        Mark a claimed request fulfilled. The claim fields are kept.

        Raises:
            RequestNotFoundError: If the request does not exist
            RequestNotClaimedError: If it is not claimed
            NotClaimerError: If the caller is not the claimer
        """
        ...

    async def delete_request(self, request_id: str, caller_id: str) -> None:
        """
        Delete a request that has not been fulfilled.

        Raises:
            RequestNotFoundError: If the request does not exist
            NotRequestOwnerError: If the caller is not the creator
            FulfilledRequestError: If the request is fulfilled
        """
        ...

    async def get_request(self, request_id: str, user_id: str) -> HelpRequest:
        """Get one request. The caller must be a member of its group."""
        ...

    async def get_group_requests(self, group_id: str, user_id: str) -> list[HelpRequest]:
        """A group's requests, newest first. The caller must be a member."""
        ...

    async def get_user_requests(self, user_id: str) -> list[HelpRequest]:
        """Requests the user created, newest first."""
        ...

    async def expire_overdue_requests(
        self, now: Optional[datetime] = None
    ) -> list[HelpRequest]:
        """
        Move every open request whose needed_by has passed to expired.

        Claimed requests are left alone; their claimer may still deliver.

        Returns:
            The requests that were expired by this call
        """
        ...
