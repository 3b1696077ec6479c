"""Listing models — accommodations and rental vehicles, with their detail rows."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gomeraway.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Listing(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An accommodation or vehicle published by a host."""

    __tablename__ = "listings"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)  # accommodation, vehicle
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    price_per_night_or_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    images_urls: Mapped[list | None] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    host: Mapped["User"] = relationship(back_populates="listings", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    accommodation_details: Mapped["AccommodationDetails | None"] = relationship(
        back_populates="listing", uselist=False, lazy="selectin", cascade="all, delete-orphan"
    )
    vehicle_details: Mapped["VehicleDetails | None"] = relationship(
        back_populates="listing", uselist=False, lazy="selectin", cascade="all, delete-orphan"
    )
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="listing", lazy="select", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title!r}, type={self.type!r}, active={self.is_active})>"


class AccommodationDetails(Base):
    """Extra fields for ``type == "accommodation"`` listings."""

    __tablename__ = "listing_details_accommodation"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        primary_key=True,
    )
    max_guests: Mapped[int | None] = mapped_column(Integer, default=None)
    bedrooms: Mapped[int | None] = mapped_column(Integer, default=None)
    bathrooms: Mapped[int | None] = mapped_column(Integer, default=None)
    amenities: Mapped[str | None] = mapped_column(Text, default=None)

    listing: Mapped["Listing"] = relationship(back_populates="accommodation_details")


class VehicleDetails(Base):
    """Extra fields for ``type == "vehicle"`` listings."""

    __tablename__ = "listing_details_vehicle"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        primary_key=True,
    )
    vehicle_type: Mapped[str | None] = mapped_column(String(100), default=None)
    seats: Mapped[int | None] = mapped_column(Integer, default=None)
    features: Mapped[str | None] = mapped_column(Text, default=None)

    listing: Mapped["Listing"] = relationship(back_populates="vehicle_details")
