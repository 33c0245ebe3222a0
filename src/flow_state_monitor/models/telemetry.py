"""Telemetry data model: raw samples, node readings and stored records."""

from dataclasses import dataclass
from datetime import datetime

from flow_state_monitor.models.state import ClassifiedState, SignalQuality


def day_of_week(moment: datetime) -> int:
    """Day index with Sunday = 0 ... Saturday = 6."""
    return moment.isoweekday() % 7


@dataclass(frozen=True)
class RawSample:
    """One acquisition tick worth of raw sensor values."""

    timestamp_ms: float
    noise_raw: int
    optical_ir: int


@dataclass(frozen=True)
class FilteredReading:
    """Derived node state, replaced as a whole on every acquisition tick."""

    noise_db: float = 0.0
    heart_rate_instant: int = 0
    heart_rate_average: int = 0
    rr_interval_ms: int = 0
    hrv_sdnn: float = 0.0
    hrv_rmssd: float = 0.0
    finger_detected: bool = False
    signal_quality: SignalQuality = SignalQuality.NONE
    raw_peak_to_peak: int = 0
    optical_raw: int = 0
    ac_magnitude: int = 0
    beat_count: int = 0
    state: ClassifiedState = ClassifiedState.STANDBY


@dataclass(frozen=True)
class TelemetryRecord:
    """Unit of historical storage and query."""

    timestamp: datetime
    day_of_week: int
    hour_of_day: int
    noise_db: float
    bpm: int
    rr_interval_ms: float
    state: ClassifiedState

    @property
    def is_flow_state(self) -> bool:
        return self.state is ClassifiedState.FLOW_STATE
