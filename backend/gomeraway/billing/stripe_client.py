"""Async Stripe API wrapper for GomeraWay."""

import logging
from decimal import Decimal

import stripe
from stripe import StripeClient

from gomeraway.config import settings

logger = logging.getLogger(__name__)


def get_stripe_client() -> StripeClient:
    """Create a StripeClient instance with async HTTP support."""
    return StripeClient(
        settings.stripe_secret_key,
        http_client=stripe.HTTPXClient(),
    )


def to_minor_units(amount: Decimal) -> int:
    """Convert a 2-decimal currency amount to Stripe's integer minor units."""
    return int((amount * 100).to_integral_value())


async def create_customer(email: str, name: str, user_id: str) -> stripe.Customer:
    """Create a Stripe customer linked to a GomeraWay user."""
    client = get_stripe_client()
    logger.info("Creating Stripe customer for user %s (%s)", user_id, email)
    customer = await client.v1.customers.create_async(
        params={
            "email": email,
            "name": name,
            "metadata": {"gomeraway_user_id": user_id},
        }
    )
    logger.info("Created Stripe customer %s for user %s", customer.id, user_id)
    return customer


async def create_booking_checkout_session(
    *,
    booking_id: str,
    user_id: str,
    listing_id: str,
    listing_title: str,
    start_date: str,
    end_date: str,
    total: Decimal,
    deposit: Decimal,
    success_url: str,
    cancel_url: str,
) -> stripe.checkout.Session:
    """Create a one-off payment Checkout Session for a booking deposit."""
    client = get_stripe_client()
    logger.info(
        "Creating deposit checkout for booking %s (deposit %s of %s)",
        booking_id,
        deposit,
        total,
    )
    return await client.v1.checkout.sessions.create_async(
        params={
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": settings.booking_currency,
                        "product_data": {
                            "name": f"Deposit for: {listing_title}",
                            "description": f"Booking from {start_date} to {end_date}",
                        },
                        "unit_amount": to_minor_units(deposit),
                    },
                    "quantity": 1,
                }
            ],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": {
                "booking_id": booking_id,
                "user_id": user_id,
                "listing_id": listing_id,
                "start_date": start_date,
                "end_date": end_date,
                "total_price": str(total),
            },
        }
    )


async def create_subscription_checkout_session(
    *,
    customer_id: str,
    price_id: str,
    user_id: str,
    plan_name: str,
    success_url: str,
    cancel_url: str,
) -> stripe.checkout.Session:
    """Create a Stripe Checkout Session for a plan subscription."""
    client = get_stripe_client()
    logger.info(
        "Creating subscription checkout for customer %s, plan %s",
        customer_id,
        plan_name,
    )
    return await client.v1.checkout.sessions.create_async(
        params={
            "mode": "subscription",
            "customer": customer_id,
            "line_items": [{"price": price_id, "quantity": 1}],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": {"user_id": user_id, "plan_name": plan_name},
        }
    )
