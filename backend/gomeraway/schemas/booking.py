"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gomeraway.schemas.listing import ListingResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCheckoutRequest(BaseModel):
    """Schema for starting a booking checkout."""

    listing_id: uuid.UUID
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCheckoutRequest":
        """Validate that end_date is strictly after start_date."""
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    listing_id: uuid.UUID
    user_id: uuid.UUID
    start_date: date
    end_date: date
    total_price: Decimal
    deposit_amount: Decimal
    deposit_paid: bool
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Booking with its nested listing, for dashboards."""

    listing: ListingResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingDetailResponse]
    total: int


class BookingCheckoutResponse(BaseModel):
    """Pending booking plus the Stripe URL where the guest pays the deposit."""

    booking: BookingResponse
    nights: int = Field(..., ge=1)
    checkout_url: str
    session_id: str
