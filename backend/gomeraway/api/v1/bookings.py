"""Bookings API router.

Guests start a booking through ``/checkout``, which reserves nothing until
the host confirms it. Hosts see and act on the bookings of **their**
listings; every host query filters through ``Listing.host_id``.
"""

from __future__ import annotations

import logging
import uuid

import stripe
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.api.deps import get_current_active_user, get_db
from gomeraway.billing.stripe_client import create_booking_checkout_session
from gomeraway.config import settings
from gomeraway.models.booking import Booking
from gomeraway.models.listing import Listing
from gomeraway.models.user import User
from gomeraway.schemas.booking import (
    BookingCheckoutRequest,
    BookingCheckoutResponse,
    BookingListResponse,
    BookingResponse,
)
from gomeraway.services.booking_service import (
    BookingConflictError,
    BookingTransitionError,
    InvalidBookingRangeError,
    cancel_booking,
    confirm_booking,
    start_booking,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_booking_for_host(
    booking_id: uuid.UUID,
    current_user: User,
    db: AsyncSession,
) -> Booking:
    """Fetch a booking and verify the user hosts the associated listing.

    Raises ``HTTPException 404`` when the booking does not exist or is not on
    a listing owned by the current user.
    """
    result = await db.execute(
        select(Booking)
        .join(Listing, Booking.listing_id == Listing.id)
        .where(Booking.id == booking_id, Listing.host_id == current_user.id)
    )
    booking = result.scalar_one_or_none()

    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


async def _paginate(db: AsyncSession, filters: list, skip: int, limit: int, join_listing: bool = False) -> dict:
    base_query = select(Booking)
    count_query = select(func.count()).select_from(Booking)
    if join_listing:
        base_query = base_query.join(Listing, Booking.listing_id == Listing.id)
        count_query = count_query.join(Listing, Booking.listing_id == Listing.id)

    total = (await db.execute(count_query.where(*filters))).scalar_one()
    result = await db.execute(
        base_query.where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    )
    return {"items": list(result.scalars().all()), "total": total}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/checkout",
    response_model=BookingCheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a booking and pay the deposit",
)
async def checkout_booking(
    body: BookingCheckoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingCheckoutResponse:
    """Create a ``pending_confirmation`` booking and a Stripe deposit checkout.

    Validates that:
    - The guest's profile is complete (403 listing the missing fields).
    - The listing exists and is active.
    - The range is bookable (not in the past, at least one night).
    - No confirmed booking shares a day with the range.
    """
    if not current_user.is_profile_complete:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "message": "Complete your profile before booking",
                "missing_fields": current_user.missing_profile_fields,
                "profile_url": "/api/v1/users/me",
            },
        )

    result = await db.execute(select(Listing).where(Listing.id == body.listing_id))
    listing = result.scalar_one_or_none()
    if listing is None or not listing.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )

    try:
        booking, quote = await start_booking(
            db,
            listing,
            current_user,
            body.start_date,
            body.end_date,
            deposit_rate=settings.booking_deposit_rate,
        )
    except InvalidBookingRangeError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except BookingConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    try:
        session = await create_booking_checkout_session(
            booking_id=str(booking.id),
            user_id=str(current_user.id),
            listing_id=str(listing.id),
            listing_title=listing.title,
            start_date=body.start_date.isoformat(),
            end_date=body.end_date.isoformat(),
            total=quote.total,
            deposit=quote.deposit,
            success_url=f"{settings.site_url}/payment/success?type=booking",
            cancel_url=f"{settings.site_url}/listing/{listing.id}",
        )
    except stripe.StripeError as e:
        logger.error("Stripe booking checkout error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    booking.stripe_session_id = session.id
    await db.flush()
    await db.refresh(booking)

    return BookingCheckoutResponse(
        booking=BookingResponse.model_validate(booking),
        nights=quote.nights,
        checkout_url=session.url,
        session_id=session.id,
    )


@router.get(
    "/mine",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_my_bookings(
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Return the bookings the current user made as a guest."""
    filters = [Booking.user_id == current_user.id]
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    return await _paginate(db, filters, skip, limit)


@router.get(
    "/host",
    response_model=BookingListResponse,
    summary="List bookings on the current host's listings",
)
async def list_host_bookings(
    listing_id: uuid.UUID | None = Query(None, description="Filter by listing"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    """Return a paginated list of bookings for listings hosted by the user."""
    filters = [Listing.host_id == current_user.id]
    if listing_id is not None:
        filters.append(Booking.listing_id == listing_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    return await _paginate(db, filters, skip, limit, join_listing=True)


@router.post(
    "/{booking_id}/confirm",
    response_model=BookingResponse,
    summary="Confirm a pending booking",
)
async def confirm(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Confirm a booking on one of the host's listings.

    Returns 409 if the booking is not pending or its dates now overlap
    another confirmed booking.
    """
    booking = await _get_booking_for_host(booking_id, current_user, db)
    try:
        await confirm_booking(db, booking)
    except (BookingConflictError, BookingTransitionError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    await db.refresh(booking)
    return booking


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Cancel a pending or confirmed booking on one of the host's listings."""
    booking = await _get_booking_for_host(booking_id, current_user, db)
    try:
        await cancel_booking(db, booking)
    except BookingTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    await db.refresh(booking)
    return booking
