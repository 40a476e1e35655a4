"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.periods import PeriodKind


class SensorSeries(BaseModel):
    """Per-bucket aggregates of one sensor, positionally aligned with the chart labels."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_id: str = Field(..., alias="sensorId")
    temperature_avg: List[Optional[float]] = Field(default_factory=list)
    temperature_min: List[Optional[float]] = Field(default_factory=list)
    temperature_max: List[Optional[float]] = Field(default_factory=list)
    humidity_avg: List[Optional[float]] = Field(default_factory=list)
    humidity_min: List[Optional[float]] = Field(default_factory=list)
    humidity_max: List[Optional[float]] = Field(default_factory=list)

    def series(self) -> List[List[Optional[float]]]:
        return [
            self.temperature_avg,
            self.temperature_min,
            self.temperature_max,
            self.humidity_avg,
            self.humidity_min,
            self.humidity_max,
        ]


class ChartPayload(BaseModel):
    """Chart data for one period.

    Exactly one of ``timestamps`` (day), ``dates`` (month) or ``months``
    (year) is populated, matching ``period``.
    """

    model_config = ConfigDict(populate_by_name=True)

    period: PeriodKind
    labels: List[str]
    timestamps: Optional[List[int]] = None
    dates: Optional[List[str]] = None
    months: Optional[List[str]] = None
    sensor_data: List[SensorSeries] = Field(default_factory=list, alias="sensorData")

    @model_validator(mode="after")
    def _check_alignment(self) -> "ChartPayload":
        expected = len(self.labels)
        keys = {
            PeriodKind.day: self.timestamps,
            PeriodKind.month: self.dates,
            PeriodKind.year: self.months,
        }
        for kind, values in keys.items():
            if kind is self.period:
                if values is None or len(values) != expected:
                    raise ValueError(f"{kind.value} chart keys must align with labels")
            elif values is not None:
                raise ValueError(f"{kind.value} chart keys present on a {self.period.value} chart")
        for sensor in self.sensor_data:
            if any(len(values) != expected for values in sensor.series()):
                raise ValueError(f"Series for sensor {sensor.sensor_id!r} do not align with labels")
        return self


class SensorValue(BaseModel):
    """One sensor's raw measurement at an instant."""

    model_config = ConfigDict(populate_by_name=True)

    sensor_id: str = Field(..., alias="sensorId")
    temperature: Optional[float] = None
    humidity: Optional[float] = None


class ReadingSnapshot(BaseModel):
    """All sensor measurements recorded at a single timestamp."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: int
    sensor_data: List[SensorValue] = Field(default_factory=list, alias="sensorData")


class DataPointsResponse(BaseModel):
    """Timestamps that hold readings within one calendar day."""

    timestamps: List[int] = Field(default_factory=list)


class ImportRowError(BaseModel):
    """Details about a CSV row that failed validation or parsing."""

    row_number: int = Field(..., ge=1)
    reason: str


class ImportResult(BaseModel):
    """Outcome of a bulk CSV import."""

    accepted: int = Field(..., ge=0)
    errors: List[ImportRowError] = Field(default_factory=list)
