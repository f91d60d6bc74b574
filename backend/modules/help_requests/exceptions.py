"""
Help request module exceptions.
"""

from shared.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)


class RequestNotFoundError(NotFoundError):
    """Raised when a request does not exist."""

    def __init__(self, request_id: str):
        super().__init__(
            "Request not found",
            code="REQUEST_NOT_FOUND",
            details={"request_id": request_id},
        )


class ItemDescriptionRequiredError(ValidationError):
    """Raised when a request has no usable item description."""

    def __init__(self):
        super().__init__("Item description is required", code="ITEM_DESCRIPTION_REQUIRED")


class NeededByInPastError(ValidationError):
    """Raised when needed_by is not in the future."""

    def __init__(self, needed_by: str):
        super().__init__(
            "Needed by date must be in the future",
            code="NEEDED_BY_IN_PAST",
            details={"needed_by": needed_by},
        )


class RequestGroupAccessDeniedError(AuthorizationError):
    """Raised when a non-member acts on a group's requests."""

    def __init__(self, group_id: str, user_id: str, message: str = "You are not a member of this group"):
        super().__init__(
            message,
            code="NOT_GROUP_MEMBER",
            details={"group_id": group_id, "user_id": user_id},
        )


class RequestNotClaimableError(StateConflictError):
    """Raised when claiming a request that is not open."""

    def __init__(self, request_id: str, status: str):
        super().__init__(
            "Request is not available for claiming",
            code="REQUEST_NOT_CLAIMABLE",
            details={"request_id": request_id, "status": status},
        )


class SelfClaimError(AuthorizationError):
    """Raised when a creator tries to claim their own request."""

    def __init__(self, request_id: str):
        super().__init__(
            "You cannot claim your own request",
            code="SELF_CLAIM",
            details={"request_id": request_id},
        )


class RequestNotClaimedError(StateConflictError):
    """Raised when unclaiming or fulfilling a request that is not claimed."""

    def __init__(self, request_id: str, status: str, message: str = "Request is not claimed"):
        super().__init__(
            message,
            code="REQUEST_NOT_CLAIMED",
            details={"request_id": request_id, "status": status},
        )


class NotClaimerError(AuthorizationError):
    """Raised when someone other than the claimer unclaims or fulfills."""

    def __init__(self, request_id: str, user_id: str, message: str):
        super().__init__(
            message,
            code="NOT_CLAIMER",
            details={"request_id": request_id, "user_id": user_id},
        )


class NotRequestOwnerError(AuthorizationError):
    """Raised when someone other than the creator deletes a request."""

    def __init__(self, request_id: str, user_id: str):
        super().__init__(
            "You can only delete your own requests",
            code="NOT_REQUEST_OWNER",
            details={"request_id": request_id, "user_id": user_id},
        )


class FulfilledRequestError(StateConflictError):
    """Raised when deleting a fulfilled request."""

    def __init__(self, request_id: str):
        super().__init__(
            "Cannot delete a fulfilled request",
            code="REQUEST_FULFILLED",
            details={"request_id": request_id},
        )
