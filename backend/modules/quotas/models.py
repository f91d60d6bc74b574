"""
Quota module data models.
"""

from typing import Optional

from pydantic import BaseModel, Field

from modules.store.models import UserLimits


class UserCounts(BaseModel):
    """
    A user's current usage, derived from the store on every call.
    """

    open_requests_count: int = Field(..., description="Requests created by the user that are open")
    groups_created_count: int = Field(..., description="Groups owned by the user")
    groups_joined_count: int = Field(..., description="Groups the user is a member of")


class UserLimitsWithCounts(BaseModel):
    """Limits and usage together, for display."""

    limits: UserLimits
    counts: UserCounts


class UpdateLimitsRequest(BaseModel):
    """Partial update of a user's ceilings. Omitted fields are unchanged."""

    max_open_requests: Optional[int] = Field(None, ge=0)
    max_groups_created: Optional[int] = Field(None, ge=0)
    max_groups_joined: Optional[int] = Field(None, ge=0)
