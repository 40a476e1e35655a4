"""Domain models shared across services."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


def clean_value(value: Optional[float]) -> Optional[float]:
    """Normalise a raw measurement: faults (None, NaN, inf) become ``None``."""
    if value is None:
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


@dataclass(frozen=True, slots=True)
class Reading:
    """A single timestamped measurement reported by one sensor.

    ``temperature`` is in degrees Celsius and ``humidity`` in percent. Either
    may be ``None`` when the sensor failed to report it.
    """

    timestamp: int
    sensor_id: str
    temperature: Optional[float] = None
    humidity: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", int(self.timestamp))
        object.__setattr__(self, "temperature", clean_value(self.temperature))
        object.__setattr__(self, "humidity", clean_value(self.humidity))
