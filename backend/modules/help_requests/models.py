"""
Help request module data models.

The HelpRequest record itself lives in modules.store.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class CreateHelpRequest(BaseModel):
    """Request body for posting a new help request to a group."""

    group_id: str = Field(..., description="Group the request is posted to")
    item_description: str = Field(..., description="What is needed")
    store_preference: Optional[str] = Field(default=None, description="Preferred store")
    needed_by: datetime = Field(..., description="When the item is needed")
    pickup_notes: Optional[str] = Field(default=None, description="Drop-off or pickup details")
