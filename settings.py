from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_STORE_NAME_ENV = "READINGS_STORE_NAME"
_STORE_PATH_ENV = "READINGS_PERSISTENCE_PATH"
_BUCKET_MINUTES_ENV = "DAY_BUCKET_MINUTES"
_LABEL_STYLE_ENV = "HOUR_LABEL_STYLE"
_KNOWN_SENSORS_ENV = "KNOWN_SENSORS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_MINUTES_PER_DAY = 24 * 60
_LABEL_STYLES = ("12h", "24h")


@dataclass(frozen=True)
class Settings:
    store_name: str
    store_persistence_path: Optional[str]
    day_bucket_minutes: int
    hour_label_style: str
    known_sensors: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_bucket_minutes(default: int) -> int:
    value = os.getenv(_BUCKET_MINUTES_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    if parsed <= 0 or _MINUTES_PER_DAY % parsed:
        return default
    return parsed


def _read_label_style(default: str) -> str:
    candidate = _read_str_env(_LABEL_STYLE_ENV, default).lower()
    return candidate if candidate in _LABEL_STYLES else default


def _read_sensor_list() -> Tuple[str, ...]:
    value = os.getenv(_KNOWN_SENSORS_ENV)
    if value is None:
        return ()
    sensors: list[str] = []
    for part in value.split(","):
        sensor_id = part.strip()
        if sensor_id and sensor_id not in sensors:
            sensors.append(sensor_id)
    return tuple(sensors)


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        store_name=_read_str_env(_STORE_NAME_ENV, "readings"),
        store_persistence_path=_read_optional_env(_STORE_PATH_ENV, "./tmp/readings.json"),
        day_bucket_minutes=_read_bucket_minutes(60),
        hour_label_style=_read_label_style("12h"),
        known_sensors=_read_sensor_list(),
        log_level=_read_log_level("INFO"),
    )
