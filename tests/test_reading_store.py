"""Unit tests for the reading store."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from datastore.reading_store import ReadingStore
from models.records import Reading
from services.errors import StoreUnavailable


def _ts(*args: int) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


def _sample() -> list[Reading]:
    return [
        Reading(timestamp=_ts(2024, 1, 1, 12), sensor_id="sensor-a", temperature=21.0, humidity=40.0),
        Reading(timestamp=_ts(2024, 1, 1, 13), sensor_id="sensor-b", temperature=None, humidity=41.0),
        Reading(timestamp=_ts(2024, 1, 2, 0), sensor_id="sensor-a", temperature=19.5, humidity=None),
    ]


def test_range_query_is_half_open() -> None:
    store = ReadingStore(name="readings")
    store.add_readings(_sample())

    readings = store.get_readings_in_range(_ts(2024, 1, 1, 12), _ts(2024, 1, 2))

    assert [reading.sensor_id for reading in readings] == ["sensor-a", "sensor-b"]


def test_timestamps_for_calendar_day() -> None:
    store = ReadingStore(name="readings")
    store.add_readings(_sample())

    assert store.get_reading_timestamps_for_calendar_day(date(2024, 1, 1)) == [
        _ts(2024, 1, 1, 12),
        _ts(2024, 1, 1, 13),
    ]
    assert store.get_reading_timestamps_for_calendar_day(date(2024, 1, 3)) == []


def test_latest_timestamp_and_lookup() -> None:
    store = ReadingStore(name="readings")
    assert store.latest_timestamp() is None

    store.add_readings(_sample())

    assert store.latest_timestamp() == _ts(2024, 1, 2)
    assert store.get_readings_at(_ts(2024, 1, 1, 13))[0].sensor_id == "sensor-b"


def test_readings_persist_to_disk_and_reload(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "readings.json"
    store = ReadingStore(name="readings", persistence_path=path)

    store.add_readings(_sample())

    assert path.exists()
    payload = json.loads(path.read_text())
    assert payload["name"] == "readings"
    assert payload["readings"][1]["temperature"] is None

    reloaded = ReadingStore(name="readings", persistence_path=path)
    assert reloaded.get_readings_in_range(0, _ts(2025, 1, 1)) == _sample()


def test_non_finite_values_are_stored_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "readings.json"
    store = ReadingStore(name="readings", persistence_path=path)

    store.add_readings([Reading(timestamp=1, sensor_id="s", temperature=float("nan"), humidity=float("inf"))])

    stored = json.loads(path.read_text())["readings"][0]
    assert stored["temperature"] is None
    assert stored["humidity"] is None


def test_corrupt_file_raises_store_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "readings.json"
    path.write_text("{not json")
    store = ReadingStore(name="readings", persistence_path=path)

    with pytest.raises(StoreUnavailable):
        store.get_readings_in_range(0, 10)


def test_failed_write_rolls_back_batch(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    store = ReadingStore(name="readings", persistence_path=blocker / "readings.json")

    with pytest.raises(StoreUnavailable):
        store.add_readings(_sample())

    store.persistence_path = None
    assert store.get_readings_in_range(0, _ts(2025, 1, 1)) == []
