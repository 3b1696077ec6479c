"""Listing limits — decide whether a host may hold one more active listing."""

from dataclasses import dataclass

from gomeraway.billing.plans import PlanTier, get_plan

#: ``remaining`` value for plans without a listing cap.
UNLIMITED = None


@dataclass(frozen=True)
class LimitDecision:
    """Outcome of a listing-limit check."""

    allowed: bool
    plan: PlanTier
    limit: int | None  # None = unlimited
    current: int
    remaining: int | None  # None = unlimited
    reason: str | None = None

    @property
    def is_unlimited(self) -> bool:
        return self.limit is None


def limit_reached_message(display_name: str, limit: int) -> str:
    plural = "" if limit == 1 else "s"
    return (
        f"You have reached the limit of {limit} active listing{plural} for your "
        f"{display_name} plan. Upgrade your plan to publish more listings."
    )


def can_create(plan: PlanTier | str | None, current_active_count: int) -> LimitDecision:
    """Check whether one more listing may become active under ``plan``.

    Applies to creating a new active listing and to reactivating an inactive
    one. A missing or unknown plan is treated as ``básico``.
    """
    limits = get_plan(plan)
    current = max(current_active_count, 0)

    if limits.max_listings is None:
        return LimitDecision(
            allowed=True,
            plan=limits.tier,
            limit=None,
            current=current,
            remaining=UNLIMITED,
        )

    allowed = current < limits.max_listings
    return LimitDecision(
        allowed=allowed,
        plan=limits.tier,
        limit=limits.max_listings,
        current=current,
        remaining=max(limits.max_listings - current, 0),
        reason=None if allowed else limit_reached_message(limits.display_name, limits.max_listings),
    )
