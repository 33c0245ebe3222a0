"""Pydantic schemas for the forecast API response."""

from datetime import datetime

from pydantic import BaseModel, Field

from flow_state_monitor.models.prediction import CollectionProgress, ForecastSnapshot, Prediction
from flow_state_monitor.models.state import ConfidenceClass, DataQuality, ForecastStatus


class PredictionOut(BaseModel):
    """A predicted flow-state window."""

    target_time: datetime = Field(description="Start of the predicted hour")
    hour_of_day: int = Field(description="Hour of day (0-23)")
    day_of_week: int = Field(description="Day of week (0 = Sunday)")
    hours_from_now: int = Field(description="Hours between now and the target")
    probability: float = Field(description="Historical flow-state probability (0-1)")
    confidence: int = Field(description="Prediction confidence (0-100)")
    confidence_class: ConfidenceClass = Field(description="Confidence band (high, medium, low)")
    consistency: float = Field(description="Outcome stability of the slot")
    sample_count: int = Field(description="Historical samples in the slot")
    expected_noise_db: float = Field(description="Average noise level in the slot (dB)")
    expected_bpm: float = Field(description="Average heart rate in the slot")
    expected_rr_interval_ms: float = Field(description="Average R-R interval in the slot (ms)")

    @classmethod
    def from_prediction(cls, prediction: Prediction) -> "PredictionOut":
        return cls(
            target_time=prediction.target_time,
            hour_of_day=prediction.hour_of_day,
            day_of_week=prediction.day_of_week,
            hours_from_now=prediction.hours_from_now,
            probability=prediction.probability,
            confidence=prediction.confidence,
            confidence_class=prediction.confidence_class,
            consistency=prediction.consistency,
            sample_count=prediction.sample_count,
            expected_noise_db=prediction.expected_noise,
            expected_bpm=prediction.expected_bpm,
            expected_rr_interval_ms=prediction.expected_rr,
        )


class ProgressOut(BaseModel):
    """Progress toward the minimum history."""

    current: int = Field(description="Valid samples collected")
    required: int = Field(description="Samples needed before forecasting")
    percent: int = Field(description="Progress percentage")
    samples_needed: int = Field(description="Samples still missing")
    estimated_hours: int = Field(description="Estimated hours until the minimum is reached")

    @classmethod
    def from_progress(cls, progress: CollectionProgress) -> "ProgressOut":
        return cls(
            current=progress.current,
            required=progress.required,
            percent=progress.percent,
            samples_needed=progress.samples_needed,
            estimated_hours=progress.estimated_hours,
        )


class ErrorOut(BaseModel):
    """Last forecast failure."""

    category: str = Field(description="Error category")
    message: str = Field(description="Error message")


class ForecastOut(BaseModel):
    """Current forecast snapshot."""

    status: ForecastStatus = Field(description="Outcome of the latest run")
    predictions: list[PredictionOut] = Field(default_factory=list)
    confidence: int = Field(description="Overall forecast confidence (0-100)")
    data_quality: DataQuality = Field(description="History volume label")
    sample_count: int = Field(description="Valid historical samples analysed")
    last_update: datetime | None = Field(default=None, description="When the snapshot was produced")
    progress: ProgressOut | None = Field(default=None, description="Set while collecting data")
    error: ErrorOut | None = Field(default=None, description="Set when the last run failed")

    @classmethod
    def from_snapshot(cls, snapshot: ForecastSnapshot) -> "ForecastOut":
        return cls(
            status=snapshot.status,
            predictions=[PredictionOut.from_prediction(p) for p in snapshot.predictions],
            confidence=snapshot.confidence,
            data_quality=snapshot.data_quality,
            sample_count=snapshot.sample_count,
            last_update=snapshot.last_update,
            progress=ProgressOut.from_progress(snapshot.progress) if snapshot.progress else None,
            error=ErrorOut(**snapshot.error) if snapshot.error else None,
        )
