"""API models package."""

from .user import TokenPayload
from .errors import ErrorResponse, ERROR_STATUS_CODES, status_code_for

__all__ = [
    "TokenPayload",
    "ErrorResponse",
    "ERROR_STATUS_CODES",
    "status_code_for",
]
