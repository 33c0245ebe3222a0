"""Pydantic schema for the live readings endpoint."""

from pydantic import BaseModel, Field

from flow_state_monitor.models.state import ClassifiedState, SignalQuality
from flow_state_monitor.models.telemetry import FilteredReading


class ReadingsOut(BaseModel):
    """Current sensing node readings."""

    noise_db: float = Field(description="Smoothed ambient noise level (dB)")
    heart_rate_instant: int = Field(description="Instantaneous heart rate (BPM)")
    heart_rate_average: int = Field(description="Rolling average heart rate (BPM)")
    rr_interval_ms: int = Field(description="Latest inter-beat interval (ms)")
    hrv_rmssd: float = Field(description="HRV RMSSD (ms)")
    hrv_sdnn: float = Field(description="HRV SDNN (ms)")
    status: ClassifiedState = Field(description="Current classified state")
    signal_quality: SignalQuality = Field(description="Optical signal quality")
    finger_detected: bool = Field(description="Whether a finger is on the sensor")
    raw_peak_to_peak: int = Field(description="Raw noise peak-to-peak amplitude")
    optical_raw: int = Field(description="Raw optical intensity")
    ac_magnitude: int = Field(description="Optical AC component magnitude")
    beat_count: int = Field(description="Cumulative accepted beats")
    sensor_available: bool = Field(default=True, description="False when running degraded")

    @classmethod
    def from_reading(cls, reading: FilteredReading, sensor_available: bool = True) -> "ReadingsOut":
        return cls(
            noise_db=round(reading.noise_db, 1),
            heart_rate_instant=reading.heart_rate_instant,
            heart_rate_average=reading.heart_rate_average,
            rr_interval_ms=reading.rr_interval_ms,
            hrv_rmssd=round(reading.hrv_rmssd, 1),
            hrv_sdnn=round(reading.hrv_sdnn, 1),
            status=reading.state,
            signal_quality=reading.signal_quality,
            finger_detected=reading.finger_detected,
            raw_peak_to_peak=reading.raw_peak_to_peak,
            optical_raw=reading.optical_raw,
            ac_magnitude=reading.ac_magnitude,
            beat_count=reading.beat_count,
            sensor_available=sensor_available,
        )
