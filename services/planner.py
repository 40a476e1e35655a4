"""Calendar arithmetic that splits a requested period into chart buckets.

All boundaries are computed in UTC. A calendar date therefore always maps to
the same 86400-second span regardless of where the server runs; converting
to a viewer's local time is left to whoever renders the chart.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import List, Tuple

from models.periods import Bucket, DayPeriod, MonthPeriod, Period, YearPeriod
from services.errors import InvalidPeriod

MIN_YEAR = 1
# The last bucket of a period must end at a representable datetime.
MAX_YEAR = 9998

_MINUTES_PER_DAY = 24 * 60
_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _epoch(moment: datetime) -> int:
    return int(moment.timestamp())


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _calendar_int(value: int | str, name: str) -> int:
    if isinstance(value, bool):
        raise InvalidPeriod(f"{name} must be an integer, got {value!r}.")
    if isinstance(value, int):
        return value
    candidate = value.strip() if isinstance(value, str) else ""
    # str.isdigit also accepts superscripts and other digits int() rejects.
    if not (candidate.isascii() and candidate.isdigit()):
        raise InvalidPeriod(f"{name} must be an integer, got {value!r}.")
    try:
        return int(candidate)
    except ValueError as exc:
        raise InvalidPeriod(f"{name} must be an integer, got {value!r}.") from exc


def validate_year(year: int | str) -> int:
    parsed = _calendar_int(year, "Year")
    if not MIN_YEAR <= parsed <= MAX_YEAR:
        raise InvalidPeriod(f"Year {parsed} is outside {MIN_YEAR}-{MAX_YEAR}.")
    return parsed


def validate_month(month: int | str) -> int:
    parsed = _calendar_int(month, "Month")
    if not 1 <= parsed <= 12:
        raise InvalidPeriod(f"Month {parsed} is outside 1-12.")
    return parsed


def parse_day(value: str | date) -> date:
    """Parse a ``YYYY-MM-DD`` calendar date, raising :class:`InvalidPeriod`."""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        validate_year(value.year)
        return value

    candidate = (value or "").strip()
    if not _DAY_PATTERN.match(candidate):
        raise InvalidPeriod(f"Invalid date {value!r}. Use YYYY-MM-DD.")
    try:
        parsed = date.fromisoformat(candidate)
    except ValueError as exc:
        raise InvalidPeriod(f"Invalid date {value!r}: {exc}") from exc
    validate_year(parsed.year)
    return parsed


def day_bounds(day: date) -> Tuple[int, int]:
    """Return the UTC ``[start, end)`` epoch seconds of a calendar day."""
    start = _midnight(day)
    return _epoch(start), _epoch(start + timedelta(days=1))


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def format_hour_label(hour: int, minute: int, style: str = "12h", with_minutes: bool = False) -> str:
    if style == "24h":
        return f"{hour:02d}:{minute:02d}"
    suffix = "AM" if hour < 12 else "PM"
    display_hour = hour % 12 or 12
    if with_minutes:
        return f"{display_hour}:{minute:02d} {suffix}"
    return f"{display_hour} {suffix}"


class BucketPlanner:
    """Computes the ordered, contiguous buckets covering a period."""

    def __init__(self, day_bucket_minutes: int = 60, hour_label_style: str = "12h") -> None:
        if day_bucket_minutes <= 0 or _MINUTES_PER_DAY % day_bucket_minutes:
            raise ValueError(
                f"day_bucket_minutes must divide {_MINUTES_PER_DAY}, got {day_bucket_minutes}."
            )
        if hour_label_style not in ("12h", "24h"):
            raise ValueError(f"Unknown hour label style {hour_label_style!r}.")
        self.day_bucket_minutes = day_bucket_minutes
        self.hour_label_style = hour_label_style

    def plan(self, period: Period) -> List[Bucket]:
        if isinstance(period, DayPeriod):
            return self._plan_day(parse_day(period.day))
        if isinstance(period, MonthPeriod):
            return self._plan_month(validate_year(period.year), validate_month(period.month))
        if isinstance(period, YearPeriod):
            return self._plan_year(validate_year(period.year))
        raise InvalidPeriod(f"Unsupported period {period!r}.")

    def _plan_day(self, day: date) -> List[Bucket]:
        midnight = _midnight(day)
        step = timedelta(minutes=self.day_bucket_minutes)
        sub_hourly = self.day_bucket_minutes % 60 != 0
        buckets: List[Bucket] = []
        for index in range(_MINUTES_PER_DAY // self.day_bucket_minutes):
            start = midnight + step * index
            start_ts = _epoch(start)
            buckets.append(
                Bucket(
                    index=index,
                    label=format_hour_label(
                        start.hour, start.minute, self.hour_label_style, with_minutes=sub_hourly
                    ),
                    key=start_ts,
                    start=start_ts,
                    end=_epoch(start + step),
                )
            )
        return buckets

    def _plan_month(self, year: int, month: int) -> List[Bucket]:
        buckets: List[Bucket] = []
        for index in range(days_in_month(year, month)):
            day = date(year, month, index + 1)
            start, end = day_bounds(day)
            buckets.append(
                Bucket(index=index, label=str(day.day), key=day.isoformat(), start=start, end=end)
            )
        return buckets

    def _plan_year(self, year: int) -> List[Bucket]:
        buckets: List[Bucket] = []
        for index in range(12):
            month = index + 1
            start = datetime(year, month, 1, tzinfo=timezone.utc)
            if month == 12:
                end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
            else:
                end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
            buckets.append(
                Bucket(
                    index=index,
                    label=_MONTH_LABELS[index],
                    key=f"{year:04d}-{month:02d}",
                    start=_epoch(start),
                    end=_epoch(end),
                )
            )
        return buckets
