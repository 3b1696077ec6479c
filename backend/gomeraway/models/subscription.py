"""Subscription model — a host's plan tier and Stripe billing state."""

import uuid

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gomeraway.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Subscription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Tracks a host's subscription plan.

    ``plan`` holds the display string (``"básico"``, ``"premium"``,
    ``"diamante"``); it is parsed into a ``PlanTier`` by
    ``gomeraway.billing.plans.parse_plan``.
    """

    __tablename__ = "subscriptions"

    # Foreign key: one subscription per user (UNIQUE enforces one-to-one)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # Stripe identifiers
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)

    # Plan & status
    plan: Mapped[str] = mapped_column(String(50), nullable=False, server_default="básico")
    status: Mapped[str] = mapped_column(String(50), nullable=False, server_default="active")

    # Relationships
    user: Mapped["User"] = relationship(back_populates="subscription", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, user_id={self.user_id}, plan={self.plan}, status={self.status})>"
