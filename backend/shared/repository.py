"""
Base repository class for database access.

Provides a common abstraction layer for Supabase-backed repositories,
encapsulating client access and the row helpers they all need.
"""

from typing import Any, Optional, TypeVar, Generic
from pydantic import BaseModel
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Row serialization helpers for PostgREST payloads

    Subclasses implement domain-specific data access methods and handle
    dict-to-Pydantic model mapping internally.

    Example:
        class GroupRepository(BaseRepository[Group]):
            def get_by_id(self, group_id: str) -> Optional[Group]:
                result = self._db.table("groups").select("*").eq("id", group_id).execute()
                if not result.data:
                    return None
                return Group(**result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @staticmethod
    def _to_row(model: BaseModel) -> dict[str, Any]:
        """Serialize a model into a JSON-safe row (datetimes as ISO strings)."""
        return model.model_dump(mode="json")

    @staticmethod
    def _first(data: Optional[list[dict[str, Any]]]) -> Optional[dict[str, Any]]:
        """Return the first row of a PostgREST result, or None."""
        return data[0] if data else None
