"""Host dashboard API — booking and listing figures for the current host."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.api.deps import get_current_active_user, get_db, get_listing_limits
from gomeraway.api.v1.billing import usage_response
from gomeraway.billing.limits import LimitDecision
from gomeraway.models.booking import Booking
from gomeraway.models.listing import Listing
from gomeraway.models.user import User
from gomeraway.schemas.dashboard import HostDashboardResponse
from gomeraway.services.booking_service import summarize_host_bookings

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/host", response_model=HostDashboardResponse)
async def host_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    decision: LimitDecision = Depends(get_listing_limits),
) -> HostDashboardResponse:
    """Pending/total bookings, this month's confirmed revenue and plan usage."""
    result = await db.execute(
        select(Booking)
        .join(Listing, Booking.listing_id == Listing.id)
        .where(Listing.host_id == current_user.id)
    )
    stats = summarize_host_bookings(result.scalars().all())

    return HostDashboardResponse(
        pending_bookings=stats.pending_bookings,
        total_bookings=stats.total_bookings,
        monthly_revenue=stats.monthly_revenue,
        total_guests=stats.total_guests,
        active_listings=decision.current,
        listing_usage=usage_response(decision),
    )
