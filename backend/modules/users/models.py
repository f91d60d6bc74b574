"""
Users module data models.
"""

from pydantic import BaseModel, Field


class UpdateProfileRequest(BaseModel):
    """Request body for updating the caller's profile."""

    name: str = Field(..., max_length=100)
    phone: str = Field(..., max_length=30)
    general_area: str = Field(default="", max_length=200, description="Neighborhood or area")
