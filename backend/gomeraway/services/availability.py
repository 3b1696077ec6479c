"""Availability and pricing for a single listing.

Everything in this module is pure: callers fetch the listing's bookings and
price from the database and pass them in. Date ranges are closed on both
ends, so a booking from June 10 to June 12 occupies the 10th, 11th and 12th,
and a new range starting on the 13th does not overlap it.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Literal, NamedTuple

CENT = Decimal("0.01")
DEPOSIT_RATE = Decimal("0.10")


class _Invalid(enum.Enum):
    INVALID = "invalid"

    def __bool__(self) -> bool:
        return False


#: Returned by ``compute_quote`` while the selection is incomplete or empty.
INVALID = _Invalid.INVALID


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


class DateRange(NamedTuple):
    """An inclusive range of calendar days."""

    start: date
    end: date

    @classmethod
    def from_row(cls, row: Any) -> DateRange:
        """Build a range from a booking row (ORM object or mapping)."""
        if isinstance(row, DateRange):
            return row
        if isinstance(row, Mapping):
            start, end = row["start_date"], row["end_date"]
        else:
            start, end = row.start_date, row.end_date
        return cls(_as_date(start), _as_date(end))

    def days(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end


def ranges_from_rows(rows: Iterable[Any]) -> list[DateRange]:
    """Convert booking rows carrying ``start_date``/``end_date`` into ranges."""
    return [DateRange.from_row(row) for row in rows]


@dataclass(frozen=True)
class BlockedDates:
    """Days a guest cannot select for a listing.

    ``booked`` holds every day covered by a confirmed booking. Every day
    strictly before ``before`` is blocked as well; that part is unbounded,
    so it is checked on membership rather than stored.
    """

    booked: frozenset[date]
    before: date | None = None

    def __contains__(self, day: object) -> bool:
        if not isinstance(day, date):
            return False
        day = _as_date(day)
        if self.before is not None and day < self.before:
            return True
        return day in self.booked

    def between(self, start: date, end: date) -> list[date]:
        """Return the blocked days inside ``[start, end]`` in order."""
        return [day for day in DateRange(start, end).days() if day in self]


@dataclass(frozen=True)
class PriceQuote:
    """Price of a stay: ``nights`` units at the listing's unit price."""

    nights: int
    total: Decimal
    deposit: Decimal

    @property
    def balance(self) -> Decimal:
        """Amount left to pay after the deposit."""
        return self.total - self.deposit


def compute_blocked_dates(
    confirmed_bookings: Iterable[Any],
    today: date | None = None,
) -> BlockedDates:
    """Union the days of all confirmed bookings plus every day before ``today``.

    The caller is responsible for passing only confirmed bookings.
    """
    booked: set[date] = set()
    for booking in ranges_from_rows(confirmed_bookings):
        booked.update(booking.days())
    return BlockedDates(booked=frozenset(booked), before=today or date.today())


def _to_price(value: Decimal | int | float | str | None) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


def compute_quote(
    start: date | datetime | None,
    end: date | datetime | None,
    unit_price: Decimal | int | float | str | None,
    deposit_rate: Decimal = DEPOSIT_RATE,
) -> PriceQuote | Literal[_Invalid.INVALID]:
    """Quote a stay from ``start`` to ``end`` at ``unit_price`` per night or day.

    Nights are counted in whole calendar days, not elapsed hours. Returns
    ``INVALID`` when either date is missing, ``end`` is not after ``start``,
    or the price is not a positive finite number.
    """
    if start is None or end is None:
        return INVALID
    price = _to_price(unit_price)
    if price is None:
        return INVALID

    nights = (_as_date(end) - _as_date(start)).days
    if nights <= 0:
        return INVALID

    total = (price * nights).quantize(CENT, rounding=ROUND_HALF_UP)
    deposit = (total * deposit_rate).quantize(CENT, rounding=ROUND_HALF_UP)
    return PriceQuote(nights=nights, total=total, deposit=deposit)


def validate_no_overlap(
    proposed_start: date | datetime,
    proposed_end: date | datetime,
    existing_confirmed: Iterable[Any],
) -> bool:
    """Return False if the proposed range shares a day with a confirmed booking.

    This is the fast check done before a write; the write itself must still
    run under the listing lock (see ``booking_service``).
    """
    proposed = DateRange(_as_date(proposed_start), _as_date(proposed_end))
    return not any(proposed.overlaps(existing) for existing in ranges_from_rows(existing_confirmed))
