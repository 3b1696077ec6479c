"""Listings API routes — public browsing, host CRUD, availability and quotes."""

import uuid
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.api.deps import (
    enforce_listing_limit,
    get_current_active_user,
    get_db,
    get_optional_user,
)
from gomeraway.config import settings
from gomeraway.models.listing import AccommodationDetails, Listing, VehicleDetails
from gomeraway.models.user import User
from gomeraway.schemas.common import MessageResponse
from gomeraway.schemas.listing import (
    AvailabilityResponse,
    ListingCreate,
    ListingListResponse,
    ListingResponse,
    ListingUpdate,
    QuoteRequest,
    QuoteResponse,
)
from gomeraway.services.availability import compute_blocked_dates, compute_quote
from gomeraway.services.booking_service import confirmed_ranges

router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_owned_listing(listing_id: uuid.UUID, current_user: User, db: AsyncSession) -> Listing:
    """Fetch a listing owned by the current user or raise 404."""
    result = await db.execute(select(Listing).where(Listing.id == listing_id))
    listing = result.scalar_one_or_none()

    if listing is None or listing.host_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )
    return listing


async def _get_visible_listing(listing_id: uuid.UUID, viewer: User | None, db: AsyncSession) -> Listing:
    """Fetch a listing that is active, or inactive but owned by ``viewer``."""
    result = await db.execute(select(Listing).where(Listing.id == listing_id))
    listing = result.scalar_one_or_none()

    if listing is None or (not listing.is_active and (viewer is None or viewer.id != listing.host_id)):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )
    return listing


async def _set_active(listing: Listing, active: bool, current_user: User, db: AsyncSession) -> Listing:
    """Toggle ``is_active``; activation is gated by the host's plan."""
    if active and not listing.is_active:
        await enforce_listing_limit(db, current_user)
    listing.is_active = active
    db.add(listing)
    await db.flush()
    await db.refresh(listing)
    return listing


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
)
async def create_listing(
    body: ListingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Create a listing owned by the authenticated host.

    Active listings count against the host's plan limit (402 when reached);
    inactive drafts can always be created.
    """
    if body.is_active:
        await enforce_listing_limit(db, current_user)

    data = body.model_dump(exclude={"accommodation_details", "vehicle_details"})
    listing = Listing(host_id=current_user.id, **data)
    if body.type == "accommodation" and body.accommodation_details is not None:
        listing.accommodation_details = AccommodationDetails(**body.accommodation_details.model_dump())
    if body.type == "vehicle" and body.vehicle_details is not None:
        listing.vehicle_details = VehicleDetails(**body.vehicle_details.model_dump())

    db.add(listing)
    await db.flush()
    await db.refresh(listing)
    return ListingResponse.model_validate(listing)


@router.get(
    "",
    response_model=ListingListResponse,
    summary="Browse active listings",
)
async def list_listings(
    listing_type: str | None = Query(None, alias="type", pattern="^(accommodation|vehicle)$"),
    location: str | None = Query(None, description="Case-insensitive substring match"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ListingListResponse:
    """Return paginated active listings. Public, no auth required."""
    filters = [Listing.is_active.is_(True)]
    if listing_type is not None:
        filters.append(Listing.type == listing_type)
    if location:
        filters.append(Listing.location.ilike(f"%{location}%"))

    count_query = select(func.count()).select_from(Listing).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    items_query = select(Listing).where(*filters).order_by(Listing.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return ListingListResponse(
        items=[ListingResponse.model_validate(item) for item in items],
        total=total,
    )


@router.get(
    "/mine",
    response_model=ListingListResponse,
    summary="List the current host's listings",
)
async def list_my_listings(
    is_active: bool | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ListingListResponse:
    """Return the host's listings, active and inactive."""
    filters = [Listing.host_id == current_user.id]
    if is_active is not None:
        filters.append(Listing.is_active.is_(is_active))

    total = (await db.execute(select(func.count()).select_from(Listing).where(*filters))).scalar_one()
    result = await db.execute(
        select(Listing).where(*filters).order_by(Listing.created_at.desc()).offset(skip).limit(limit)
    )
    return ListingListResponse(
        items=[ListingResponse.model_validate(item) for item in result.scalars().all()],
        total=total,
    )


@router.get(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Get a listing by ID",
)
async def get_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> ListingResponse:
    """Retrieve a listing. Inactive listings are only visible to their host."""
    listing = await _get_visible_listing(listing_id, viewer, db)
    return ListingResponse.model_validate(listing)


@router.put(
    "/{listing_id}",
    response_model=ListingResponse,
    summary="Update a listing",
)
async def update_listing(
    listing_id: uuid.UUID,
    body: ListingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Partially update a listing. Reactivating it is gated by the plan limit.

    A detail block updates the listing's detail row, creating it if the
    listing has none yet; only the block matching the listing type is
    accepted.
    """
    listing = await _get_owned_listing(listing_id, current_user, db)

    update_data = body.model_dump(exclude_unset=True, exclude={"accommodation_details", "vehicle_details"})
    detail_blocks = {
        "accommodation": (body.accommodation_details, "accommodation_details", AccommodationDetails),
        "vehicle": (body.vehicle_details, "vehicle_details", VehicleDetails),
    }
    for listing_type, (block, attr, _) in detail_blocks.items():
        if block is not None and listing.type != listing_type:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{attr} given for a listing of type {listing.type}",
            )

    if update_data.get("is_active") and not listing.is_active:
        await enforce_listing_limit(db, current_user)

    for field, value in update_data.items():
        setattr(listing, field, value)

    block, attr, model = detail_blocks[listing.type]
    if block is not None:
        details = getattr(listing, attr)
        if details is None:
            setattr(listing, attr, model(**block.model_dump()))
        else:
            for key, value in block.model_dump(exclude_unset=True).items():
                setattr(details, key, value)

    db.add(listing)
    await db.flush()
    await db.refresh(listing)
    return ListingResponse.model_validate(listing)


@router.post(
    "/{listing_id}/activate",
    response_model=ListingResponse,
    summary="Publish a listing",
)
async def activate_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Mark a listing active. No-op if it already is."""
    listing = await _get_owned_listing(listing_id, current_user, db)
    return ListingResponse.model_validate(await _set_active(listing, True, current_user, db))


@router.post(
    "/{listing_id}/deactivate",
    response_model=ListingResponse,
    summary="Unpublish a listing",
)
async def deactivate_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ListingResponse:
    """Mark a listing inactive, freeing a slot in the host's plan."""
    listing = await _get_owned_listing(listing_id, current_user, db)
    return ListingResponse.model_validate(await _set_active(listing, False, current_user, db))


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    summary="Delete a listing",
)
async def delete_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Delete a listing together with its detail rows and bookings."""
    listing = await _get_owned_listing(listing_id, current_user, db)

    await db.delete(listing)
    await db.flush()

    return MessageResponse(message="Listing deleted")


@router.get(
    "/{listing_id}/availability",
    response_model=AvailabilityResponse,
    summary="Blocked dates for the booking calendar",
)
async def get_availability(
    listing_id: uuid.UUID,
    window_start: date | None = Query(None, alias="from"),
    window_end: date | None = Query(None, alias="to"),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> AvailabilityResponse:
    """Return the blocked days inside ``[from, to]``.

    Every day before ``blocked_before`` is blocked as well. The window
    defaults to today through ``settings.availability_window_days`` ahead.
    """
    listing = await _get_visible_listing(listing_id, viewer, db)

    today = date.today()
    start = window_start or today
    end = window_end or today + timedelta(days=settings.availability_window_days)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="'to' must not be before 'from'",
        )
    if (end - start).days > settings.availability_window_days:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Window cannot exceed {settings.availability_window_days} days",
        )

    blocked = compute_blocked_dates(await confirmed_ranges(db, listing.id), today=today)
    return AvailabilityResponse(
        listing_id=listing.id,
        blocked_before=today,
        window_start=start,
        window_end=end,
        blocked_dates=blocked.between(start, end),
    )


@router.post(
    "/{listing_id}/quote",
    response_model=QuoteResponse,
    summary="Price a date selection",
)
async def quote_listing(
    listing_id: uuid.UUID,
    body: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> QuoteResponse:
    """Price a calendar selection.

    Incomplete or empty selections are not an error: the response simply
    has ``valid`` set to false.
    """
    listing = await _get_visible_listing(listing_id, viewer, db)
    quote = compute_quote(
        body.start_date,
        body.end_date,
        listing.price_per_night_or_day,
        settings.booking_deposit_rate,
    )
    if not quote:
        return QuoteResponse(valid=False, unit_price=listing.price_per_night_or_day)

    return QuoteResponse(
        valid=True,
        nights=quote.nights,
        unit_price=listing.price_per_night_or_day,
        total=quote.total,
        deposit=quote.deposit,
    )
