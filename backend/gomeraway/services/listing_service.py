"""Listing service — active-listing counts and the serialized plan-limit check."""

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.billing.limits import LimitDecision, can_create
from gomeraway.models.listing import Listing
from gomeraway.models.user import User
from gomeraway.services.subscription_service import get_active_plan

logger = logging.getLogger(__name__)


async def count_active_listings(db: AsyncSession, host_id: uuid.UUID) -> int:
    """Count the host's listings with ``is_active`` set."""
    result = await db.execute(
        select(func.count())
        .select_from(Listing)
        .where(Listing.host_id == host_id, Listing.is_active.is_(True))
    )
    return result.scalar_one()


async def lock_host(db: AsyncSession, host_id: uuid.UUID) -> None:
    """Take a row lock on the host's user row until the transaction ends.

    Two requests from the same host (e.g. two browser tabs) serialize here,
    so the count taken afterwards is still valid when the listing is written.
    """
    await db.execute(select(User.id).where(User.id == host_id).with_for_update())


async def check_can_activate(db: AsyncSession, host_id: uuid.UUID, lock: bool = True) -> LimitDecision:
    """Decide whether the host may have one more active listing right now."""
    if lock:
        await lock_host(db, host_id)
    plan = await get_active_plan(db, host_id)
    current = await count_active_listings(db, host_id)
    decision = can_create(plan, current)
    if not decision.allowed:
        logger.info(
            "Listing limit reached for host %s: %d/%s on %s",
            host_id,
            current,
            decision.limit,
            decision.plan.value,
        )
    return decision
