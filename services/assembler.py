"""Shapes aggregated buckets into the chart payload consumed by the dashboard."""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from app.schemas import ChartPayload, SensorSeries
from models.periods import Bucket, Period, PeriodKind
from services.aggregator import SensorAggregate


class ResultAssembler:
    """Merges per-sensor aggregates with bucket labels.

    Values are passed through in storage units (Celsius and percent relative
    humidity); conversions for display happen in the client.
    """

    def assemble(
        self,
        period: Period,
        buckets: Sequence[Bucket],
        aggregates: Mapping[str, Sequence[SensorAggregate]],
    ) -> ChartPayload:
        keys: Dict[str, List] = {}
        if period.kind is PeriodKind.day:
            keys["timestamps"] = [int(bucket.key) for bucket in buckets]
        elif period.kind is PeriodKind.month:
            keys["dates"] = [str(bucket.key) for bucket in buckets]
        else:
            keys["months"] = [str(bucket.key) for bucket in buckets]

        return ChartPayload(
            period=period.kind,
            labels=[bucket.label for bucket in buckets],
            sensor_data=[
                self._series(sensor_id, series) for sensor_id, series in aggregates.items()
            ],
            **keys,
        )

    @staticmethod
    def _series(sensor_id: str, series: Sequence[SensorAggregate]) -> SensorSeries:
        return SensorSeries(
            sensor_id=sensor_id,
            temperature_avg=[item.temperature.avg for item in series],
            temperature_min=[item.temperature.min for item in series],
            temperature_max=[item.temperature.max for item in series],
            humidity_avg=[item.humidity.avg for item in series],
            humidity_min=[item.humidity.min for item in series],
            humidity_max=[item.humidity.max for item in series],
        )
