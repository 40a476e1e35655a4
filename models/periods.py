"""Calendar periods requested by chart consumers and the buckets they split into."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class PeriodKind(str, Enum):
    day = "day"
    month = "month"
    year = "year"


@dataclass(frozen=True)
class DayPeriod:
    day: date

    @property
    def kind(self) -> PeriodKind:
        return PeriodKind.day

    def __str__(self) -> str:
        return f"day:{self.day.isoformat()}"


@dataclass(frozen=True)
class MonthPeriod:
    year: int
    month: int

    @property
    def kind(self) -> PeriodKind:
        return PeriodKind.month

    def __str__(self) -> str:
        return f"month:{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class YearPeriod:
    year: int

    @property
    def kind(self) -> PeriodKind:
        return PeriodKind.year

    def __str__(self) -> str:
        return f"year:{self.year:04d}"


Period = DayPeriod | MonthPeriod | YearPeriod


@dataclass(frozen=True, slots=True)
class Bucket:
    """Half-open ``[start, end)`` slice of a period, in epoch seconds.

    ``key`` is the machine-readable form of the bucket start sent to chart
    consumers: the start timestamp for day charts, ``YYYY-MM-DD`` for month
    charts and ``YYYY-MM`` for year charts.
    """

    index: int
    label: str
    key: int | str
    start: int
    end: int

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp < self.end
