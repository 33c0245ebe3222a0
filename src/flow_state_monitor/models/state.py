"""Closed enumerations shared by the sensing node and the forecast task."""

from enum import Enum


class ClassifiedState(str, Enum):
    """Four-quadrant occupant state."""

    FLOW_STATE = "Flow State"  # Quiet + good physiology (target)
    NORMAL_LEARNING = "Normal Learning"  # Loud + good physiology
    STANDBY = "Standby"  # Quiet + poor physiology, or no valid heart rate
    DISTRACTED = "Distracted"  # Loud + poor physiology


class DetectorState(str, Enum):
    """Beat detector state machine states."""

    NO_FINGER = "no_finger"
    ACQUIRING = "acquiring"
    TRACKING = "tracking"
    PULSE = "pulse"


class SignalQuality(str, Enum):
    """Optical signal quality band derived from the waveform amplitude."""

    NONE = "none"  # No finger on the sensor
    WEAK = "weak"  # amplitude < 30
    FAIR = "fair"  # amplitude < 100
    GOOD = "good"  # amplitude < 500
    EXCELLENT = "excellent"


class DataQuality(str, Enum):
    """Historical data volume label."""

    INSUFFICIENT = "insufficient"  # < 100 samples
    LOW = "low"  # < 300
    MODERATE = "moderate"  # < 800
    GOOD = "good"  # < 1500
    EXCELLENT = "excellent"


class ForecastStatus(str, Enum):
    """Outcome of the most recent forecast run."""

    PENDING = "pending"  # No run has completed yet
    READY = "ready"  # Predictions computed
    COLLECTING = "collecting"  # Not enough history yet
    ERROR = "error"  # Last run failed


class ConfidenceClass(str, Enum):
    """Display band for a prediction's confidence."""

    HIGH = "high"  # >= 70
    MEDIUM = "medium"  # >= 50
    LOW = "low"
