"""Pydantic v2 request/response schemas for the user profile endpoints."""

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ProfileUpdate(BaseModel):
    """Schema for partially updating the current user's profile."""

    full_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    date_of_birth: date | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """The current user's profile."""

    id: uuid.UUID
    email: str
    full_name: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    date_of_birth: date | None = None
    role: str
    is_active: bool
    is_profile_complete: bool
    missing_profile_fields: list[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
