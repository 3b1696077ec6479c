"""Pydantic v2 response schemas for dashboard endpoints."""

from decimal import Decimal

from pydantic import BaseModel

from gomeraway.schemas.billing import ListingUsageResponse


class HostDashboardResponse(BaseModel):
    """Summary figures for a host's dashboard."""

    pending_bookings: int
    total_bookings: int
    monthly_revenue: Decimal
    total_guests: int
    active_listings: int
    listing_usage: ListingUsageResponse
