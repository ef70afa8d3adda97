from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Union

from ..core.exceptions import ValidationError

DayLike = Union[date, datetime]

_END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM")


def normalize_day(value: DayLike) -> date:
    """Drop the time part: the calendar day a date or instant falls on."""
    if isinstance(value, datetime):
        return value.date()
    return value


def day_bounds(value: DayLike) -> tuple[datetime, datetime]:
    """Return ``[00:00:00.000, 23:59:59.999]`` of the day ``value`` falls on."""
    day = normalize_day(value)
    return datetime.combine(day, time.min), datetime.combine(day, _END_OF_DAY)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First day 00:00 to last day 23:59:59.999. ``month`` is 1-indexed."""
    if not 1 <= int(month) <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")
    last = calendar.monthrange(int(year), int(month))[1]
    start, _ = day_bounds(date(int(year), int(month), 1))
    _, end = day_bounds(date(int(year), int(month), last))
    return start, end


@dataclass(frozen=True)
class DayRange:
    """Inclusive ascending run of calendar days.

    Iterating twice yields the same days; an inverted range is empty.
    """

    start: date
    end: date

    def __iter__(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def __len__(self) -> int:
        return max((self.end - self.start).days + 1, 0)

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, date):
            return False
        return self.start <= normalize_day(value) <= self.end


def days_in_range(start: DayLike, end: DayLike) -> DayRange:
    return DayRange(normalize_day(start), normalize_day(end))


def elapsed_hours(delta: timedelta) -> Decimal:
    """Exact elapsed hours, no rounding."""
    return Decimal(delta // timedelta(microseconds=1)) / Decimal(3_600_000_000)


def round_hours(delta: timedelta) -> Decimal:
    """Elapsed hours rounded half-up to 2 decimals."""
    return elapsed_hours(delta).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_late(moment: datetime, threshold: time) -> bool:
    """Second resolution: 09:29:59.999 is on time, 09:30:00 is late."""
    return moment.time().replace(microsecond=0) >= threshold
