"""Telemetry field mapping between node readings, the store and records.

Write path (node -> store):
- raw_peak_to_peak -> field1 (int)
- noise_db -> field2 (1 decimal)
- hrv_rmssd -> field3 (1 decimal)
- optical_raw -> field4 (int)
- heart_rate_average -> field5 (int)
- heart_rate_instant -> field6 (int)
- finger_detected -> field7 (0/1)
- ac_magnitude -> field8 (int)
- state -> status (label)

Read path (store -> TelemetryRecord):
- created_at -> timestamp (converted to the analysis timezone)
- field2 -> noise_db
- field3 -> rr_interval_ms
- field5 / field6 -> bpm (average when present, instant otherwise)
"""

from __future__ import annotations

import math
from datetime import UTC, datetime, tzinfo
from typing import Any

from flow_state_monitor.classifier import classify, is_valid_bpm
from flow_state_monitor.models.telemetry import FilteredReading, TelemetryRecord, day_of_week


def _to_float(value: Any) -> float:
    """Lenient float parse; anything non-numeric becomes 0."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _to_int(value: Any) -> int:
    """Lenient integer parse (truncating); anything non-numeric becomes 0."""
    return int(_to_float(value))


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class TelemetryTransformer:
    """Encode node readings for upload and decode stored feed rows."""

    @staticmethod
    def to_fields(reading: FilteredReading) -> dict[str, str]:
        """Convert a node reading to the store's field payload.

        Args:
            reading: Current node reading

        Returns:
            Dict of form fields ready for the update endpoint
        """
        return {
            "field1": str(int(reading.raw_peak_to_peak)),
            "field2": f"{reading.noise_db:.1f}",
            "field3": f"{reading.hrv_rmssd:.1f}",
            "field4": str(int(reading.optical_raw)),
            "field5": str(int(reading.heart_rate_average)),
            "field6": str(int(reading.heart_rate_instant)),
            "field7": "1" if reading.finger_detected else "0",
            "field8": str(int(reading.ac_magnitude)),
            "status": reading.state.value,
        }

    @staticmethod
    def from_feed(feed: dict[str, Any], tz: tzinfo) -> TelemetryRecord | None:
        """Convert one stored feed row to a TelemetryRecord.

        Non-numeric fields default to 0. Rows without a usable timestamp or
        with a heart rate outside the valid range are rejected.

        Args:
            feed: Raw row from the feeds query
            tz: Timezone used for day-of-week / hour-of-day binning

        Returns:
            TelemetryRecord, or None if the row is unusable
        """
        created = _parse_timestamp(feed.get("created_at"))
        if created is None:
            return None

        noise = _to_float(feed.get("field2"))
        rr_interval = _to_float(feed.get("field3"))
        bpm_avg = _to_int(feed.get("field5"))
        bpm_instant = _to_int(feed.get("field6"))
        bpm = bpm_avg if bpm_avg > 0 else bpm_instant

        if not is_valid_bpm(bpm):
            return None

        local = created.astimezone(tz)
        return TelemetryRecord(
            timestamp=local,
            day_of_week=day_of_week(local),
            hour_of_day=local.hour,
            noise_db=noise,
            bpm=bpm,
            rr_interval_ms=rr_interval,
            state=classify(noise, bpm, rr_interval),
        )

    @classmethod
    def from_feeds(
        cls, feeds: list[dict[str, Any]], tz: tzinfo
    ) -> tuple[list[TelemetryRecord], int]:
        """Convert a batch of feed rows.

        Returns:
            Tuple of (valid records, number of rows dropped)
        """
        records: list[TelemetryRecord] = []
        dropped = 0
        for feed in feeds:
            record = cls.from_feed(feed, tz) if isinstance(feed, dict) else None
            if record is None:
                dropped += 1
            else:
                records.append(record)
        return records, dropped
