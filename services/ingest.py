"""Bulk CSV import of sensor readings into the reading store."""

from __future__ import annotations

import csv
import io
import logging
import math
from datetime import datetime, timezone
from typing import Optional

from app.schemas import ImportResult, ImportRowError
from datastore.reading_store import ReadingStore
from models.records import Reading

logger = logging.getLogger(__name__)

_VALUE_COLUMNS = ("temperature", "humidity")


class ReadingImporter:
    """Parses CSV uploads and appends the valid rows to the store in one batch."""

    def __init__(self, store: ReadingStore) -> None:
        self.store = store

    def import_csv(self, contents: bytes | str) -> ImportResult:
        if isinstance(contents, bytes):
            contents = contents.decode("utf-8-sig")
        if not contents.strip():
            raise ValueError("Uploaded file is empty.")

        reader = csv.DictReader(io.StringIO(contents))
        if not reader.fieldnames:
            raise ValueError("CSV file is missing a header row.")

        normalized: dict[str, str] = {}
        for name in reader.fieldnames:
            if not name:
                continue
            key = name.lower().strip()
            if key in normalized:
                raise ValueError(f"CSV has duplicate column: {key}")
            normalized[key] = name
        missing = sorted({"timestamp", "sensor_id"} - normalized.keys())
        if missing:
            raise ValueError(f"CSV missing required columns: {', '.join(missing)}")
        if not any(column in normalized for column in _VALUE_COLUMNS):
            raise ValueError("CSV must contain a temperature or humidity column.")

        sensor_col = normalized["sensor_id"]
        timestamp_col = normalized["timestamp"]
        value_cols = {column: normalized.get(column) for column in _VALUE_COLUMNS}

        readings: list[Reading] = []
        errors: list[ImportRowError] = []
        for row_number, row in enumerate(reader, start=2):
            sensor_raw = (row.get(sensor_col) or "").strip()
            timestamp_raw = (row.get(timestamp_col) or "").strip()

            if not sensor_raw:
                self._skip(errors, row_number, "missing sensor_id")
                continue
            if not timestamp_raw:
                self._skip(errors, row_number, "missing timestamp", sensor_raw)
                continue
            try:
                timestamp = parse_timestamp(timestamp_raw)
            except ValueError:
                self._skip(errors, row_number, "invalid timestamp", sensor_raw)
                continue

            values: dict[str, Optional[float]] = {}
            for column, source in value_cols.items():
                raw = (row.get(source) or "").strip() if source else ""
                if not raw:
                    values[column] = None
                    continue
                try:
                    value = float(raw)
                except ValueError:
                    reason = f"invalid numeric {column}"
                    break
                if not math.isfinite(value):
                    reason = f"non-finite {column}"
                    break
                values[column] = value
            else:
                readings.append(Reading(timestamp=timestamp, sensor_id=sensor_raw, **values))
                continue
            self._skip(errors, row_number, reason, sensor_raw)

        accepted = self.store.add_readings(readings) if readings else 0
        logger.info(
            "Imported readings",
            extra={"reading_count": accepted, "error_count": len(errors)},
        )
        return ImportResult(accepted=accepted, errors=errors)

    @staticmethod
    def _skip(
        errors: list[ImportRowError],
        row_number: int,
        reason: str,
        sensor_id: Optional[str] = None,
    ) -> None:
        errors.append(ImportRowError(row_number=row_number, reason=reason))
        logger.warning(
            "Skipping row %d: %s",
            row_number,
            reason,
            extra={"row_number": row_number, "reason": reason, "sensor_id": sensor_id},
        )


def parse_timestamp(value: str) -> int:
    """Parse epoch seconds or an ISO-8601 instant (naive values are UTC)."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    try:
        return int(candidate)
    except ValueError:
        pass

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return int(parsed.timestamp())
