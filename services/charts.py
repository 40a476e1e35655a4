"""Chart computation for day, month and year periods."""

from __future__ import annotations

import logging
import time
from datetime import date
from functools import lru_cache
from typing import Any, Callable, Iterable, List, Optional, Tuple, TypeVar

from app.schemas import ChartPayload, ReadingSnapshot, SensorValue
from datastore.reading_store import ReadingStore, build_default_store
from models.periods import DayPeriod, MonthPeriod, Period, YearPeriod
from models.records import Reading
from services.aggregator import Aggregator
from services.assembler import ResultAssembler
from services.errors import StoreUnavailable
from services.planner import BucketPlanner, parse_day, validate_month, validate_year
from settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChartService:
    """Coordinates bucket planning, reading retrieval and aggregation.

    Every call recomputes from raw readings; nothing is cached between
    requests.
    """

    def __init__(
        self,
        store: ReadingStore,
        planner: BucketPlanner,
        aggregator: Aggregator,
        assembler: ResultAssembler,
        known_sensors: Iterable[str] = (),
    ) -> None:
        self.store = store
        self.planner = planner
        self.aggregator = aggregator
        self.assembler = assembler
        self.known_sensors: Tuple[str, ...] = tuple(known_sensors)

    def compute_day_chart(self, day: str | date) -> ChartPayload:
        return self.compute_chart(DayPeriod(parse_day(day)))

    def compute_month_chart(self, year: int | str, month: int | str) -> ChartPayload:
        return self.compute_chart(MonthPeriod(validate_year(year), validate_month(month)))

    def compute_year_chart(self, year: int | str) -> ChartPayload:
        return self.compute_chart(YearPeriod(validate_year(year)))

    def compute_chart(self, period: Period) -> ChartPayload:
        start_time = time.perf_counter()
        buckets = self.planner.plan(period)
        range_start, range_end = buckets[0].start, buckets[-1].end

        readings = self._read(
            lambda: self.store.get_readings_in_range(range_start, range_end),
            period=str(period),
            range_start=range_start,
            range_end=range_end,
        )
        aggregates = self.aggregator.aggregate(buckets, readings, self.known_sensors)
        payload = self.assembler.assemble(period, buckets, aggregates)

        if logger.isEnabledFor(logging.DEBUG):
            assigned = sum(self.aggregator.count_assigned(buckets, readings))
            logger.debug(
                "Assigned %d of %d readings to buckets",
                assigned,
                len(readings),
                extra={"period": str(period), "bucket_count": len(buckets)},
            )
        logger.info(
            "Computed chart",
            extra={
                "period": str(period),
                "bucket_count": len(buckets),
                "reading_count": len(readings),
                "sensor_count": len(aggregates),
                "duration_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return payload

    def data_points_for_date(self, day: str | date) -> List[int]:
        """Sorted distinct timestamps that hold readings on a UTC calendar day."""
        parsed = parse_day(day)
        return self._read(
            lambda: self.store.get_reading_timestamps_for_calendar_day(parsed),
            period=str(DayPeriod(parsed)),
        )

    def current_reading(self) -> ReadingSnapshot:
        latest = self._read(self.store.latest_timestamp)
        if latest is None:
            raise KeyError("No readings have been recorded yet.")
        return self.reading_at(latest)

    def reading_at(self, timestamp: int) -> ReadingSnapshot:
        readings = self._read(
            lambda: self.store.get_readings_at(timestamp), timestamp=timestamp
        )
        if not readings:
            raise KeyError(f"No readings recorded at timestamp {timestamp}.")
        return _snapshot(timestamp, readings)

    def _read(self, fetch: Callable[[], T], **context: Any) -> T:
        try:
            return fetch()
        except StoreUnavailable:
            logger.exception("Reading store unavailable", extra=context)
            raise


def _snapshot(timestamp: int, readings: List[Reading]) -> ReadingSnapshot:
    # A sensor reporting twice at one instant keeps its last report.
    by_sensor: dict[str, SensorValue] = {}
    for reading in readings:
        by_sensor[reading.sensor_id] = SensorValue(
            sensor_id=reading.sensor_id,
            temperature=reading.temperature,
            humidity=reading.humidity,
        )
    return ReadingSnapshot(timestamp=timestamp, sensor_data=list(by_sensor.values()))


@lru_cache
def build_default_chart_service(store_path: Optional[str] = None) -> ChartService:
    """Factory that wires the chart service from environment settings."""
    settings = get_settings()
    store = build_default_store(path=store_path)
    planner = BucketPlanner(
        day_bucket_minutes=settings.day_bucket_minutes,
        hour_label_style=settings.hour_label_style,
    )
    return ChartService(
        store=store,
        planner=planner,
        aggregator=Aggregator(),
        assembler=ResultAssembler(),
        known_sensors=settings.known_sensors,
    )
