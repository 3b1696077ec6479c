"""User model — profile of a guest, host, or admin."""

from datetime import date

from sqlalchemy import Boolean, Date, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gomeraway.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

# Fields a guest must fill in before starting a booking
REQUIRED_PROFILE_FIELDS = ("full_name", "phone", "address", "city", "country", "date_of_birth")


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Profile row keyed by the external auth provider's user id."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    role: Mapped[str] = mapped_column(String(50), default="guest", nullable=False)  # guest, host, admin

    # Relationships
    subscription: Mapped["Subscription | None"] = relationship(  # noqa: F821
        "Subscription", back_populates="user", uselist=False, lazy="selectin"
    )
    listings: Mapped[list["Listing"]] = relationship("Listing", back_populates="host", lazy="selectin")  # noqa: F821

    @property
    def missing_profile_fields(self) -> list[str]:
        """Required profile fields that are unset or blank."""
        missing = []
        for field in REQUIRED_PROFILE_FIELDS:
            value = getattr(self, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(field)
        return missing

    @property
    def is_profile_complete(self) -> bool:
        return not self.missing_profile_fields

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
