from __future__ import annotations
import json
from dataclasses import asdict
from datetime import date
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional

from models.records import Reading
from services.errors import StoreUnavailable
from services.planner import day_bounds
from settings import get_settings


class ReadingStore:
    """Raw sensor readings kept in memory, optionally mirrored to a JSON file.

    The persisted file is read lazily on first access so a corrupt or
    unreadable file surfaces as :class:`StoreUnavailable` on the request that
    needs it rather than at application start-up.
    """

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._readings: List[Reading] = []
        self._loaded = persistence_path is None
        self._lock = Lock()

    def add_readings(self, readings: Iterable[Reading]) -> int:
        batch = list(readings)
        with self._lock:
            self._ensure_loaded()
            previous = len(self._readings)
            self._readings.extend(batch)
            try:
                self._persist()
            except StoreUnavailable:
                del self._readings[previous:]
                raise
        return len(batch)

    def get_readings_in_range(self, start: int, end: int) -> List[Reading]:
        """Readings with ``start <= timestamp < end`` in insertion order."""
        with self._lock:
            self._ensure_loaded()
            return [reading for reading in self._readings if start <= reading.timestamp < end]

    def get_reading_timestamps_for_calendar_day(self, day: date) -> List[int]:
        start, end = day_bounds(day)
        with self._lock:
            self._ensure_loaded()
            return sorted({r.timestamp for r in self._readings if start <= r.timestamp < end})

    def get_readings_at(self, timestamp: int) -> List[Reading]:
        with self._lock:
            self._ensure_loaded()
            return [reading for reading in self._readings if reading.timestamp == timestamp]

    def latest_timestamp(self) -> Optional[int]:
        with self._lock:
            self._ensure_loaded()
            if not self._readings:
                return None
            return max(reading.timestamp for reading in self._readings)

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            "name": self.name,
            "readings": [asdict(reading) for reading in self._readings],
        }
        try:
            self.persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))
        except OSError as exc:
            raise StoreUnavailable(
                f"Could not write readings to {self.persistence_path}: {exc}"
            ) from exc

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        assert self.persistence_path is not None
        if not self.persistence_path.exists():
            self._loaded = True
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
            readings = [Reading(**item) for item in data.get("readings", [])]
        except (OSError, json.JSONDecodeError, TypeError, ValueError, AttributeError) as exc:
            raise StoreUnavailable(
                f"Could not load readings from {self.persistence_path}: {exc}"
            ) from exc

        self._readings = readings
        self._loaded = True


@lru_cache
def build_default_store(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> ReadingStore:
    settings = get_settings()
    store_name = settings.store_name if name is None else name
    store_path = settings.store_persistence_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return ReadingStore(name=store_name, persistence_path=persistence)
