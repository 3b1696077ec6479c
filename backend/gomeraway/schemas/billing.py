"""Pydantic v2 request/response schemas for billing endpoints."""

from pydantic import BaseModel

# --- Request schemas ---


class CheckoutRequest(BaseModel):
    """Request to create a Stripe Checkout session for a plan."""

    plan: str  # "básico", "premium" or "diamante"
    success_url: str | None = None
    cancel_url: str | None = None


# --- Response schemas ---


class PlanResponse(BaseModel):
    """Plan details for display."""

    name: str
    display_name: str
    max_listings: int | None  # None = unlimited
    price_monthly_cents: int


class ListingUsageResponse(BaseModel):
    """Active listings against the plan limit."""

    can_create: bool
    current_count: int
    max_allowed: int | None  # None = unlimited
    remaining: int | None  # None = unlimited
    is_unlimited: bool
    message: str | None = None


class SubscriptionResponse(BaseModel):
    """Subscription status + listing usage for the authenticated host."""

    plan: PlanResponse
    status: str
    stripe_subscription_id: str | None
    usage: ListingUsageResponse


class CheckoutResponse(BaseModel):
    """Stripe Checkout session URL returned to frontend."""

    checkout_url: str
    session_id: str


class PlansListResponse(BaseModel):
    """All available plans."""

    plans: list[PlanResponse]
