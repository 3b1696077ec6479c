"""Plan gating dependencies — enforce listing limits based on subscription plan."""

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.auth.dependencies import get_current_active_user
from gomeraway.billing.limits import LimitDecision
from gomeraway.database import get_db
from gomeraway.models.user import User
from gomeraway.services.listing_service import check_can_activate


async def enforce_listing_limit(db: AsyncSession, user: User) -> LimitDecision:
    """Raise 402 if the user may not have one more active listing.

    The host row stays locked until the request's transaction commits, so
    the listing write that follows sees the same count.
    """
    decision = await check_can_activate(db, user.id)
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={
                "message": decision.reason,
                "limit": decision.limit,
                "current": decision.current,
                "plan": decision.plan.value,
                "upgrade_url": "/api/v1/billing/checkout",
            },
        )
    return decision


async def get_listing_limits(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_active_user),
) -> LimitDecision:
    """Current listing-limit decision for the user, without locking."""
    return await check_can_activate(db, user.id, lock=False)