"""Booking service — serialized booking writes and host booking statistics.

Every write that could break the "confirmed bookings never overlap" rule
locks the listing row first and re-reads the confirmed bookings inside the
same transaction. On PostgreSQL the exclusion constraint on ``bookings`` is
the final guard; a violation surfaces here as ``BookingConflictError``.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.models.booking import Booking
from gomeraway.models.listing import Listing
from gomeraway.models.user import User
from gomeraway.services.availability import (
    DEPOSIT_RATE,
    DateRange,
    PriceQuote,
    compute_quote,
    ranges_from_rows,
    validate_no_overlap,
)

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Dates conflict with an existing booking"


class BookingError(Exception):
    """Base class for booking rule violations."""


class InvalidBookingRangeError(BookingError):
    """The requested dates do not form a bookable range."""


class BookingConflictError(BookingError):
    """The requested dates overlap a confirmed booking."""


class BookingTransitionError(BookingError):
    """The booking cannot move to the requested status."""


async def lock_listing(db: AsyncSession, listing_id: uuid.UUID) -> Listing | None:
    """Fetch the listing with a row lock held until the transaction ends."""
    result = await db.execute(select(Listing).where(Listing.id == listing_id).with_for_update())
    return result.scalar_one_or_none()


async def confirmed_ranges(
    db: AsyncSession,
    listing_id: uuid.UUID,
    exclude_booking_id: uuid.UUID | None = None,
) -> list[DateRange]:
    """Date ranges of the listing's confirmed bookings."""
    query = select(Booking.start_date, Booking.end_date).where(
        Booking.listing_id == listing_id,
        Booking.status == "confirmed",
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    result = await db.execute(query)
    return ranges_from_rows(result.all())


async def start_booking(
    db: AsyncSession,
    listing: Listing,
    guest: User,
    start_date: date,
    end_date: date,
    today: date | None = None,
    deposit_rate: Decimal = DEPOSIT_RATE,
) -> tuple[Booking, PriceQuote]:
    """Create a ``pending_confirmation`` booking for ``guest``.

    Pending bookings block nothing, so the listing row is not locked; only
    dates that are already confirmed are refused.

    Raises:
        InvalidBookingRangeError: The range is empty, inverted or starts in the past.
        BookingConflictError: The range overlaps a confirmed booking.
    """
    today = today or date.today()
    if start_date < today:
        raise InvalidBookingRangeError("Bookings cannot start in the past")

    quote = compute_quote(start_date, end_date, listing.price_per_night_or_day, deposit_rate)
    if not quote:
        raise InvalidBookingRangeError("Select a check-out date after the check-in date")

    existing = await confirmed_ranges(db, listing.id)
    if not validate_no_overlap(start_date, end_date, existing):
        raise BookingConflictError(CONFLICT_MESSAGE)

    booking = Booking(
        listing_id=listing.id,
        user_id=guest.id,
        start_date=start_date,
        end_date=end_date,
        total_price=quote.total,
        deposit_amount=quote.deposit,
        deposit_paid=False,
        status="pending_confirmation",
    )
    db.add(booking)
    await db.flush()
    logger.info(
        "Booking %s started by user %s on listing %s (%s to %s, %d nights, total %s)",
        booking.id,
        guest.id,
        listing.id,
        start_date,
        end_date,
        quote.nights,
        quote.total,
    )
    return booking, quote


async def confirm_booking(db: AsyncSession, booking: Booking) -> Booking:
    """Move a pending booking to ``confirmed`` if its dates are still free."""
    if booking.status != "pending_confirmation":
        raise BookingTransitionError(f"Cannot confirm a booking that is {booking.status}")

    await lock_listing(db, booking.listing_id)
    existing = await confirmed_ranges(db, booking.listing_id, exclude_booking_id=booking.id)
    if not validate_no_overlap(booking.start_date, booking.end_date, existing):
        raise BookingConflictError(CONFLICT_MESSAGE)

    booking.status = "confirmed"
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("Exclusion constraint rejected booking %s", booking.id)
        raise BookingConflictError(CONFLICT_MESSAGE) from e

    logger.info("Booking %s confirmed", booking.id)
    return booking


async def cancel_booking(db: AsyncSession, booking: Booking) -> Booking:
    """Cancel a pending or confirmed booking. Cancelled bookings are final."""
    if booking.status == "cancelled":
        raise BookingTransitionError("Booking is already cancelled")

    booking.status = "cancelled"
    await db.flush()
    logger.info("Booking %s cancelled", booking.id)
    return booking


@dataclass(frozen=True)
class HostBookingStats:
    pending_bookings: int
    total_bookings: int
    monthly_revenue: Decimal
    total_guests: int


def summarize_host_bookings(bookings: Iterable[Booking], today: date | None = None) -> HostBookingStats:
    """Dashboard figures for a host's bookings.

    Revenue counts confirmed bookings created in the current calendar month;
    guests are distinct users with a confirmed booking.
    """
    today = today or date.today()
    bookings = list(bookings)
    confirmed = [b for b in bookings if b.status == "confirmed"]

    revenue = sum(
        (
            b.total_price
            for b in confirmed
            if b.created_at is not None
            and b.created_at.year == today.year
            and b.created_at.month == today.month
        ),
        Decimal("0.00"),
    )
    return HostBookingStats(
        pending_bookings=sum(1 for b in bookings if b.status == "pending_confirmation"),
        total_bookings=len(bookings),
        monthly_revenue=revenue,
        total_guests=len({b.user_id for b in confirmed}),
    )
