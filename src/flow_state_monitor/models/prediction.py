"""Forecast results and the published snapshot."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from flow_state_monitor.models.state import ConfidenceClass, DataQuality, ForecastStatus


@dataclass(frozen=True)
class Prediction:
    """A future hour with a high likelihood of flow state."""

    target_time: datetime
    hour_of_day: int
    day_of_week: int
    probability: float
    confidence: int
    expected_noise: float
    expected_bpm: float
    expected_rr: float
    sample_count: int
    consistency: float
    hours_from_now: int

    @property
    def score(self) -> float:
        """Ranking score: probability weighted by confidence."""
        return self.probability * (self.confidence / 100)

    @property
    def confidence_class(self) -> ConfidenceClass:
        if self.confidence >= 70:
            return ConfidenceClass.HIGH
        if self.confidence >= 50:
            return ConfidenceClass.MEDIUM
        return ConfidenceClass.LOW


@dataclass(frozen=True)
class ForecastResult:
    """Output of a single engine evaluation."""

    predictions: tuple[Prediction, ...]
    confidence: int
    data_quality: DataQuality
    sample_count: int


@dataclass(frozen=True)
class CollectionProgress:
    """Progress toward the minimum history needed for a forecast."""

    current: int
    required: int

    @property
    def samples_needed(self) -> int:
        return max(self.required - self.current, 0)

    @property
    def percent(self) -> int:
        return round(self.current / self.required * 100) if self.required else 100

    @property
    def estimated_hours(self) -> int:
        """Hours until the minimum is reached at 12 uploads per hour."""
        return -(-self.samples_needed // 12)


@dataclass(frozen=True)
class ForecastSnapshot:
    """Read-side view of the latest forecast, replaced as a single object."""

    status: ForecastStatus = ForecastStatus.PENDING
    predictions: tuple[Prediction, ...] = ()
    confidence: int = 0
    data_quality: DataQuality = DataQuality.INSUFFICIENT
    sample_count: int = 0
    last_update: datetime | None = None
    progress: CollectionProgress | None = None
    error: dict[str, Any] | None = None
