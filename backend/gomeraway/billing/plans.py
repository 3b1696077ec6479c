"""Plan definitions — subscription tiers and listing limits."""

import enum
import logging
import unicodedata
from dataclasses import dataclass

from gomeraway.config import settings

logger = logging.getLogger(__name__)


class PlanTier(str, enum.Enum):
    """Host subscription tiers. The value is the display string stored in the DB."""

    BASICO = "básico"
    PREMIUM = "premium"
    DIAMANTE = "diamante"


@dataclass(frozen=True)
class PlanLimits:
    """Listing limit and pricing for a subscription plan."""

    tier: PlanTier
    display_name: str
    max_listings: int | None  # None = unlimited
    price_monthly_cents: int  # in euro cents (e.g., 2500 = 25.00 €)
    stripe_price_id: str | None

    @property
    def name(self) -> str:
        return self.tier.value


PLANS: dict[PlanTier, PlanLimits] = {
    PlanTier.BASICO: PlanLimits(
        tier=PlanTier.BASICO,
        display_name="Básico",
        max_listings=1,
        price_monthly_cents=1000,
        stripe_price_id=settings.stripe_basico_price_id or None,
    ),
    PlanTier.PREMIUM: PlanLimits(
        tier=PlanTier.PREMIUM,
        display_name="Premium",
        max_listings=5,
        price_monthly_cents=2500,
        stripe_price_id=settings.stripe_premium_price_id or None,
    ),
    PlanTier.DIAMANTE: PlanLimits(
        tier=PlanTier.DIAMANTE,
        display_name="Diamante",
        max_listings=None,
        price_monthly_cents=5000,
        stripe_price_id=settings.stripe_diamante_price_id or None,
    ),
}

# Most restrictive tier, used whenever the plan is missing or unknown.
FALLBACK_TIER = PlanTier.BASICO


def _normalize(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


_TIERS_BY_KEY: dict[str, PlanTier] = {_normalize(tier.value): tier for tier in PlanTier}


def lookup_plan(name: str | PlanTier | None) -> PlanTier | None:
    """Parse a stored plan string (accented or not, any case). None if unknown."""
    if isinstance(name, PlanTier):
        return name
    if not name:
        return None
    return _TIERS_BY_KEY.get(_normalize(name))


def parse_plan(name: str | PlanTier | None) -> PlanTier:
    """Parse a plan string, failing closed to ``básico`` when missing or unknown."""
    tier = lookup_plan(name)
    if tier is None:
        logger.warning("Unknown or missing plan %r, falling back to %s", name, FALLBACK_TIER.value)
        return FALLBACK_TIER
    return tier


def get_plan(name: str | PlanTier | None) -> PlanLimits:
    """Get plan limits by name. Defaults to básico if unknown."""
    return PLANS[parse_plan(name)]
