"""
Membership store selection.

The backend named by the STORAGE_BACKEND setting is created once per
process and shared by every service.
"""

from typing import Optional

from shared.config import get_settings

from .interfaces import IMembershipStore

_store_instance: Optional[IMembershipStore] = None


def get_membership_store() -> IMembershipStore:
    """Get the membership store singleton."""
    global _store_instance
    if _store_instance is None:
        settings = get_settings()
        if settings.storage_backend == "supabase":
            from shared.database import get_supabase_client
            from .repository import SupabaseStore
            _store_instance = SupabaseStore(get_supabase_client())
        else:
            from .memory import InMemoryStore
            _store_instance = InMemoryStore()
    return _store_instance


def reset_membership_store() -> None:
    """Reset the store singleton (for testing)."""
    global _store_instance
    _store_instance = None
