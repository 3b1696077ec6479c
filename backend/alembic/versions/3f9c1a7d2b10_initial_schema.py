"""initial_schema

Revision ID: 3f9c1a7d2b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True, unique=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True, unique=True),
        sa.Column("plan", sa.String(50), server_default="básico", nullable=False),
        sa.Column("status", sa.String(50), server_default="active", nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_subscriptions_user_id", "subscriptions", ["user_id"], unique=True)

    op.create_table(
        "listings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("host_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("price_per_night_or_day", sa.Numeric(10, 2), nullable=False),
        sa.Column("images_urls", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("type IN ('accommodation', 'vehicle')", name="ck_listings_type"),
        sa.CheckConstraint("price_per_night_or_day > 0", name="ck_listings_price_positive"),
    )
    op.create_index("ix_listings_host_id", "listings", ["host_id"])
    op.create_index("ix_listings_is_active", "listings", ["is_active"])

    op.create_table(
        "listing_details_accommodation",
        sa.Column(
            "listing_id", sa.UUID(), sa.ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("max_guests", sa.Integer(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("amenities", sa.Text(), nullable=True),
    )
    op.create_table(
        "listing_details_vehicle",
        sa.Column(
            "listing_id", sa.UUID(), sa.ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("vehicle_type", sa.String(100), nullable=True),
        sa.Column("seats", sa.Integer(), nullable=True),
        sa.Column("features", sa.Text(), nullable=True),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("listing_id", sa.UUID(), sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("deposit_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("deposit_paid", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("stripe_session_id", sa.String(255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("end_date > start_date", name="ck_bookings_dates_ordered"),
        sa.CheckConstraint(
            "status IN ('pending_confirmation', 'confirmed', 'cancelled')",
            name="ck_bookings_status",
        ),
    )
    op.create_index("ix_bookings_listing_id", "bookings", ["listing_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_status", "bookings", ["status"])
    op.create_index("ix_bookings_listing_dates", "bookings", ["listing_id", "start_date", "end_date"])

    # Confirmed bookings of one listing may not share a day. Ranges are
    # inclusive on both ends, hence '[]'.
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_confirmed_no_overlap
        EXCLUDE USING gist (
            listing_id WITH =,
            daterange(start_date, end_date, '[]') WITH &&
        )
        WHERE (status = 'confirmed')
        """
    )


def downgrade() -> None:
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_confirmed_no_overlap")
    op.drop_table("bookings")
    op.drop_table("listing_details_vehicle")
    op.drop_table("listing_details_accommodation")
    op.drop_table("listings")
    op.drop_table("subscriptions")
    op.drop_table("users")
