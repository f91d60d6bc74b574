"""
Base exception classes for the Cup of Sugar backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application: every guard
failure in the engine is one of these, and the API layer maps each base
class to an HTTP status.
"""

from typing import Optional, Any


class CupOfSugarError(Exception):
    """
    Base exception for all Cup of Sugar errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(CupOfSugarError):
    """Resource not found (or its existence is intentionally masked)."""

    pass


class ValidationError(CupOfSugarError):
    """Input validation failed."""

    pass


class QuotaExceededError(CupOfSugarError):
    """A per-user limit would be exceeded by the operation."""

    def __init__(
        self,
        message: str,
        limit_name: str,
        limit: int,
        current: int,
        code: Optional[str] = None,
    ):
        super().__init__(
            message,
            code=code or "QUOTA_EXCEEDED",
            details={"limit_name": limit_name, "limit": limit, "current": current},
        )
        self.limit_name = limit_name
        self.limit = limit
        self.current = current


class AuthenticationError(CupOfSugarError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(CupOfSugarError):
    """Authorization failed (caller lacks rights for the action)."""

    pass


class StateConflictError(CupOfSugarError):
    """The entity is not in the state required for the requested transition."""

    pass


class ExternalServiceError(CupOfSugarError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
