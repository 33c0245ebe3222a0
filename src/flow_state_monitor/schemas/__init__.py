"""API response schemas."""

from flow_state_monitor.schemas.forecast import ErrorOut, ForecastOut, PredictionOut, ProgressOut
from flow_state_monitor.schemas.readings import ReadingsOut

__all__ = ["ErrorOut", "ForecastOut", "PredictionOut", "ProgressOut", "ReadingsOut"]
