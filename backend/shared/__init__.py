"""
Shared infrastructure for the Cup of Sugar backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- locks: Process-local keyed locks
- validation: Input sanitization, format checks and token generation

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    CupOfSugarError,
    NotFoundError,
    ValidationError,
    QuotaExceededError,
    AuthenticationError,
    AuthorizationError,
    StateConflictError,
    ExternalServiceError,
)
from .locks import KeyedLock
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "CupOfSugarError",
    "NotFoundError",
    "ValidationError",
    "QuotaExceededError",
    "AuthenticationError",
    "AuthorizationError",
    "StateConflictError",
    "ExternalServiceError",
    "KeyedLock",
    "AuthenticatedUser",
]
