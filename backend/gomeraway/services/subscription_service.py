"""Subscription service — lookups and Stripe customer linking for host subscriptions."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.billing.plans import PlanTier
from gomeraway.billing.stripe_client import create_customer
from gomeraway.models.subscription import Subscription
from gomeraway.models.user import User

logger = logging.getLogger(__name__)


async def get_subscription(db: AsyncSession, user_id: uuid.UUID) -> Subscription | None:
    """Return the user's subscription row, whatever its status."""
    result = await db.execute(select(Subscription).where(Subscription.user_id == user_id))
    return result.scalar_one_or_none()


async def get_active_plan(db: AsyncSession, user_id: uuid.UUID) -> str | None:
    """Return the plan string of the user's active subscription, or None.

    The raw string is returned so that the limit check can log and fail
    closed on values it does not recognise.
    """
    subscription = await get_subscription(db, user_id)
    if subscription is None or subscription.status != "active":
        return None
    return subscription.plan


async def get_or_create_subscription(
    db: AsyncSession, user: User, plan: PlanTier = PlanTier.BASICO
) -> Subscription:
    """Get the user's subscription row or create an inactive one to hold Stripe ids.

    New rows are ``incomplete`` until the checkout completes; they never
    grant a plan by themselves.
    """
    subscription = await get_subscription(db, user.id)
    if subscription is not None:
        return subscription

    logger.info("Creating subscription record for user %s", user.id)
    subscription = Subscription(user_id=user.id, plan=plan.value, status="incomplete")
    db.add(subscription)
    await db.flush()
    return subscription


async def ensure_stripe_customer(
    db: AsyncSession, user: User, subscription: Subscription
) -> str:
    """Ensure the user has a Stripe customer ID. Create one if missing."""
    if subscription.stripe_customer_id:
        return subscription.stripe_customer_id

    customer = await create_customer(
        email=user.email,
        name=user.full_name or user.email,
        user_id=str(user.id),
    )
    subscription.stripe_customer_id = customer.id
    await db.flush()
    logger.info("Linked Stripe customer %s to user %s", customer.id, user.id)
    return customer.id