"""Create the GomeraWay plan products and monthly prices in Stripe test mode.

Run once:
    python -m gomeraway.billing.scripts.create_stripe_products

Outputs price IDs to set in .env:
    STRIPE_BASICO_PRICE_ID=price_xxx
    STRIPE_PREMIUM_PRICE_ID=price_xxx
    STRIPE_DIAMANTE_PRICE_ID=price_xxx
"""

import asyncio

from gomeraway.billing.plans import PLANS
from gomeraway.billing.stripe_client import get_stripe_client
from gomeraway.config import settings


def _describe(max_listings: int | None) -> str:
    if max_listings is None:
        return "Unlimited active listings"
    return f"Up to {max_listings} active listing{'' if max_listings == 1 else 's'}"


async def main() -> None:
    if not settings.stripe_secret_key:
        print("ERROR: STRIPE_SECRET_KEY is not set in .env")
        return

    client = get_stripe_client()

    env_lines = []
    for plan in PLANS.values():
        product = await client.v1.products.create_async(
            params={
                "name": f"GomeraWay {plan.display_name}",
                "description": _describe(plan.max_listings),
                "metadata": {"plan_name": plan.name},
            }
        )
        price = await client.v1.prices.create_async(
            params={
                "product": product.id,
                "unit_amount": plan.price_monthly_cents,
                "currency": settings.booking_currency,
                "recurring": {"interval": "month"},
            }
        )
        print(f"Created product: {product.name} ({product.id})")
        print(f"  Price: {plan.price_monthly_cents / 100:.2f} EUR/mo ({price.id})")
        env_lines.append(f"STRIPE_{plan.tier.name}_PRICE_ID={price.id}")

    print("\n--- Add these to your .env ---")
    for line in env_lines:
        print(line)


if __name__ == "__main__":
    asyncio.run(main())
