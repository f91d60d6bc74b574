"""
Help requests module.

Handles posting requests and the open -> claimed -> fulfilled lifecycle,
with unclaim, delete and the overdue expiry sweep.

Public API:
- IRequestLifecycleService: Interface for request operations
- RequestLifecycleService: Store-backed implementation
- CreateHelpRequest: Request to post a new help request
"""

from .interfaces import IRequestLifecycleService
from .models import CreateHelpRequest
from .exceptions import (
    FulfilledRequestError,
    ItemDescriptionRequiredError,
    NeededByInPastError,
    NotClaimerError,
    NotRequestOwnerError,
    RequestGroupAccessDeniedError,
    RequestNotClaimableError,
    RequestNotClaimedError,
    RequestNotFoundError,
    SelfClaimError,
)
from .service import (
    RequestLifecycleService,
    get_request_service,
    reset_request_service,
)

__all__ = [
    # Interface
    "IRequestLifecycleService",
    # Models
    "CreateHelpRequest",
    # Exceptions
    "FulfilledRequestError",
    "ItemDescriptionRequiredError",
    "NeededByInPastError",
    "NotClaimerError",
    "NotRequestOwnerError",
    "RequestGroupAccessDeniedError",
    "RequestNotClaimableError",
    "RequestNotClaimedError",
    "RequestNotFoundError",
    "SelfClaimError",
    # Service
    "RequestLifecycleService",
    "get_request_service",
    "reset_request_service",
]
