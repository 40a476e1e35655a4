"""Aggregation logic for sensor readings."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from models.periods import Bucket
from models.records import Reading


@dataclass(frozen=True, slots=True)
class MetricAggregate:
    """Summary of one metric within one bucket; all ``None`` when it had no values."""

    avg: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None


@dataclass(frozen=True, slots=True)
class SensorAggregate:
    """Temperature and humidity summaries of one sensor for one bucket."""

    sensor_id: str
    temperature: MetricAggregate = MetricAggregate()
    humidity: MetricAggregate = MetricAggregate()


@dataclass
class _Accumulator:
    count: int = 0
    total: float = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def add(self, value: Optional[float]) -> None:
        if value is None:
            return
        self.count += 1
        self.total += value
        if self.minimum is None or value < self.minimum:
            self.minimum = value
        if self.maximum is None or value > self.maximum:
            self.maximum = value

    def result(self) -> MetricAggregate:
        if not self.count:
            return MetricAggregate()
        assert self.minimum is not None and self.maximum is not None
        # Float rounding in the running sum can push the mean past an extreme.
        mean = min(max(self.total / self.count, self.minimum), self.maximum)
        return MetricAggregate(avg=mean, min=self.minimum, max=self.maximum)


@dataclass
class _SensorAccumulator:
    temperature: List[_Accumulator] = field(default_factory=list)
    humidity: List[_Accumulator] = field(default_factory=list)

    @classmethod
    def sized(cls, bucket_count: int) -> "_SensorAccumulator":
        return cls(
            temperature=[_Accumulator() for _ in range(bucket_count)],
            humidity=[_Accumulator() for _ in range(bucket_count)],
        )


def locate_bucket(starts: Sequence[int], end: int, timestamp: int) -> Optional[int]:
    """Index of the bucket containing ``timestamp``, or ``None`` if out of range.

    ``starts`` must be the sorted start boundaries of contiguous buckets and
    ``end`` the exclusive end of the last one.
    """
    if not starts or timestamp < starts[0] or timestamp >= end:
        return None
    return bisect_right(starts, timestamp) - 1


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(
        self,
        buckets: Sequence[Bucket],
        readings: Iterable[Reading],
        sensor_ids: Iterable[str] = (),
    ) -> Dict[str, List[SensorAggregate]]:
        """Fold readings into per-sensor, per-bucket temperature and humidity summaries.

        Every sensor in ``sensor_ids`` and every sensor that appears in
        ``readings`` gets one entry per bucket, whether or not any of its
        readings fell inside the buckets.
        """
        starts = [bucket.start for bucket in buckets]
        end = buckets[-1].end if buckets else 0
        accumulators: Dict[str, _SensorAccumulator] = {}

        for sensor_id in sensor_ids:
            if sensor_id not in accumulators:
                accumulators[sensor_id] = _SensorAccumulator.sized(len(buckets))

        for reading in readings:
            sensor = accumulators.get(reading.sensor_id)
            if sensor is None:
                sensor = _SensorAccumulator.sized(len(buckets))
                accumulators[reading.sensor_id] = sensor

            index = locate_bucket(starts, end, reading.timestamp)
            if index is None:
                continue
            sensor.temperature[index].add(reading.temperature)
            sensor.humidity[index].add(reading.humidity)

        return {
            sensor_id: [
                SensorAggregate(
                    sensor_id=sensor_id,
                    temperature=temperature.result(),
                    humidity=humidity.result(),
                )
                for temperature, humidity in zip(sensor.temperature, sensor.humidity)
            ]
            for sensor_id, sensor in accumulators.items()
        }

    def count_assigned(self, buckets: Sequence[Bucket], readings: Iterable[Reading]) -> List[int]:
        """Number of readings falling in each bucket, regardless of value validity."""
        starts = [bucket.start for bucket in buckets]
        end = buckets[-1].end if buckets else 0
        counts = [0] * len(buckets)
        for reading in readings:
            index = locate_bucket(starts, end, reading.timestamp)
            if index is not None:
                counts[index] += 1
        return counts
