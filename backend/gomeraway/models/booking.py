"""Booking model — a guest's reservation of a listing for a date range."""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gomeraway.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

BOOKING_STATUSES = ("pending_confirmation", "confirmed", "cancelled")


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation of a listing from ``start_date`` through ``end_date`` (inclusive).

    Confirmed bookings of the same listing never overlap; on PostgreSQL this
    is backed by the ``ex_bookings_confirmed_no_overlap`` exclusion constraint
    created in the initial migration.
    """

    __tablename__ = "bookings"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    deposit_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    status: Mapped[str] = mapped_column(
        String(50),
        default="pending_confirmation",
        index=True,
    )  # pending_confirmation, confirmed, cancelled
    stripe_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Relationships
    listing: Mapped["Listing"] = relationship(back_populates="bookings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    guest: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (Index("ix_bookings_listing_dates", "listing_id", "start_date", "end_date"),)

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, listing_id={self.listing_id}, user_id={self.user_id}, status={self.status})>"
