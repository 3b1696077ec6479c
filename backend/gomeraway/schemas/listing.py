"""Pydantic v2 request/response schemas for listing endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LISTING_TYPE_PATTERN = "^(accommodation|vehicle)$"

# ---------------------------------------------------------------------------
# Detail schemas
# ---------------------------------------------------------------------------


class AccommodationDetailsSchema(BaseModel):
    max_guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    amenities: str | None = None

    model_config = ConfigDict(from_attributes=True)


class VehicleDetailsSchema(BaseModel):
    vehicle_type: str | None = Field(None, max_length=100)
    seats: int | None = Field(None, ge=1)
    features: str | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ListingCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=5, max_length=255)
    description: str | None = None
    type: str = Field(..., pattern=LISTING_TYPE_PATTERN)
    location: str | None = Field(None, max_length=255)
    price_per_night_or_day: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    images_urls: list[str] = Field(default_factory=list)
    is_active: bool = True
    accommodation_details: AccommodationDetailsSchema | None = None
    vehicle_details: VehicleDetailsSchema | None = None

    @model_validator(mode="after")
    def check_details_match_type(self) -> "ListingCreate":
        """Only the detail block matching ``type`` may be sent."""
        if self.type == "accommodation" and self.vehicle_details is not None:
            raise ValueError("vehicle_details given for an accommodation listing")
        if self.type == "vehicle" and self.accommodation_details is not None:
            raise ValueError("accommodation_details given for a vehicle listing")
        return self


class ListingUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional.

    ``title``, ``price_per_night_or_day`` and ``is_active`` may be omitted
    but not cleared. Detail blocks are checked against the listing's type
    by the route, since the type itself cannot change.
    """

    title: str | None = Field(None, min_length=5, max_length=255)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    price_per_night_or_day: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    images_urls: list[str] | None = None
    is_active: bool | None = None
    accommodation_details: AccommodationDetailsSchema | None = None
    vehicle_details: VehicleDetailsSchema | None = None

    @field_validator("title", "price_per_night_or_day", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class QuoteRequest(BaseModel):
    """A date selection from the calendar; either end may still be missing."""

    start_date: date | None = None
    end_date: date | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    """Public listing information returned from the API."""

    id: uuid.UUID
    host_id: uuid.UUID
    type: str
    title: str
    description: str | None = None
    location: str | None = None
    price_per_night_or_day: Decimal
    images_urls: list[str] | None = None
    is_active: bool
    accommodation_details: AccommodationDetailsSchema | None = None
    vehicle_details: VehicleDetailsSchema | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ListingListResponse(BaseModel):
    """Paginated list of listings."""

    items: list[ListingResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Days a guest cannot pick for a listing inside ``[window_start, window_end]``."""

    listing_id: uuid.UUID
    blocked_before: date
    window_start: date
    window_end: date
    blocked_dates: list[date]


class QuoteResponse(BaseModel):
    """Price quote; ``valid`` is false while the selection is incomplete."""

    valid: bool
    nights: int = 0
    unit_price: Decimal
    total: Decimal | None = None
    deposit: Decimal | None = None
