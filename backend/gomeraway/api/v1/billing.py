"""Billing API endpoints — plans, subscription status and Stripe Checkout."""

import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from gomeraway.api.deps import get_current_active_user, get_db, get_listing_limits
from gomeraway.billing.limits import LimitDecision
from gomeraway.billing.plans import PLANS, PlanLimits, get_plan, lookup_plan
from gomeraway.billing.stripe_client import create_subscription_checkout_session
from gomeraway.config import settings
from gomeraway.models.user import User
from gomeraway.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    ListingUsageResponse,
    PlanResponse,
    PlansListResponse,
    SubscriptionResponse,
)
from gomeraway.services.subscription_service import (
    ensure_stripe_customer,
    get_or_create_subscription,
    get_subscription,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


def plan_response(plan: PlanLimits) -> PlanResponse:
    return PlanResponse(
        name=plan.name,
        display_name=plan.display_name,
        max_listings=plan.max_listings,
        price_monthly_cents=plan.price_monthly_cents,
    )


def usage_response(decision: LimitDecision) -> ListingUsageResponse:
    return ListingUsageResponse(
        can_create=decision.allowed,
        current_count=decision.current,
        max_allowed=decision.limit,
        remaining=decision.remaining,
        is_unlimited=decision.is_unlimited,
        message=decision.reason,
    )


@router.get("/plans", response_model=PlansListResponse)
async def list_plans() -> PlansListResponse:
    """List available plans (public — no auth required)."""
    return PlansListResponse(plans=[plan_response(p) for p in PLANS.values()])


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_my_subscription(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    decision: LimitDecision = Depends(get_listing_limits),
) -> SubscriptionResponse:
    """Get the current plan and how many listings it still allows.

    Hosts without an active subscription are reported on the básico plan
    with status ``none``.
    """
    subscription = await get_subscription(db, current_user.id)
    return SubscriptionResponse(
        plan=plan_response(get_plan(decision.plan)),
        status=subscription.status if subscription is not None else "none",
        stripe_subscription_id=subscription.stripe_subscription_id if subscription is not None else None,
        usage=usage_response(decision),
    )


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    body: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CheckoutResponse:
    """Create a Stripe Checkout session for a plan subscription."""
    tier = lookup_plan(body.plan)
    if tier is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid plan. Choose 'básico', 'premium' or 'diamante'.",
        )

    plan = get_plan(tier)
    if not plan.stripe_price_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stripe price ID not configured for plan.",
        )

    subscription = await get_or_create_subscription(db, current_user, tier)

    success_url = body.success_url or f"{settings.site_url}/payment/success?type=subscription"
    cancel_url = body.cancel_url or f"{settings.site_url}/membership"

    try:
        customer_id = await ensure_stripe_customer(db, current_user, subscription)
        session = await create_subscription_checkout_session(
            customer_id=customer_id,
            price_id=plan.stripe_price_id,
            user_id=str(current_user.id),
            plan_name=plan.name,
            success_url=success_url,
            cancel_url=cancel_url,
        )
    except stripe.StripeError as e:
        logger.error("Stripe checkout error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    return CheckoutResponse(
        checkout_url=session.url,
        session_id=session.id,
    )
