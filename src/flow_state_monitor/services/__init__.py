"""Application services."""

from flow_state_monitor.services.error_handler import ErrorHandler
from flow_state_monitor.services.forecast import ForecastEngine
from flow_state_monitor.services.forecast_service import ForecastService
from flow_state_monitor.services.pattern import PatternAggregator
from flow_state_monitor.services.scheduler import ForecastScheduler
from flow_state_monitor.services.telemetry import TelemetryHistoryClient, TelemetryUploader

__all__ = [
    "ErrorHandler",
    "ForecastEngine",
    "ForecastScheduler",
    "ForecastService",
    "PatternAggregator",
    "TelemetryHistoryClient",
    "TelemetryUploader",
]
