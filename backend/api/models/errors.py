"""
Error response models.

Every guard failure is a CupOfSugarError; the API maps its base class to
an HTTP status and returns its to_dict() body.
"""

from typing import Any

from pydantic import BaseModel, Field

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    CupOfSugarError,
    ExternalServiceError,
    NotFoundError,
    QuotaExceededError,
    StateConflictError,
    ValidationError,
)


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str = Field(..., description="Machine-readable error code")
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


# Checked in order; the first matching base class wins
ERROR_STATUS_CODES: list[tuple[type[CupOfSugarError], int]] = [
    (ValidationError, 422),
    (QuotaExceededError, 409),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateConflictError, 409),
    (ExternalServiceError, 502),
]


def status_code_for(exc: CupOfSugarError) -> int:
    """HTTP status for a domain error. Unclassified errors are 500."""
    for error_cls, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_cls):
            return status_code
    return 500
