"""Domain models."""

from flow_state_monitor.models.pattern import PatternCell
from flow_state_monitor.models.prediction import (
    CollectionProgress,
    ForecastResult,
    ForecastSnapshot,
    Prediction,
)
from flow_state_monitor.models.state import (
    ClassifiedState,
    ConfidenceClass,
    DataQuality,
    DetectorState,
    ForecastStatus,
    SignalQuality,
)
from flow_state_monitor.models.telemetry import (
    FilteredReading,
    RawSample,
    TelemetryRecord,
    day_of_week,
)

__all__ = [
    "ClassifiedState",
    "CollectionProgress",
    "ConfidenceClass",
    "DataQuality",
    "DetectorState",
    "FilteredReading",
    "ForecastResult",
    "ForecastSnapshot",
    "ForecastStatus",
    "PatternCell",
    "Prediction",
    "RawSample",
    "SignalQuality",
    "TelemetryRecord",
    "day_of_week",
]
