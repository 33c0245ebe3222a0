"""Domain exceptions."""


class FlowMonitorError(Exception):
    """Base class for flow-state-monitor errors."""


class SensorUnavailableError(FlowMonitorError):
    """A signal source could not be initialised or read."""


class TelemetryStoreError(FlowMonitorError):
    """The telemetry time-series API rejected or failed a request."""

    def __init__(self, message: str, endpoint: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class MalformedTelemetryError(FlowMonitorError):
    """A telemetry payload could not be interpreted at all."""


class InsufficientDataError(FlowMonitorError):
    """Fewer valid historical samples than the forecast minimum."""

    def __init__(self, sample_count: int, required: int):
        super().__init__(f"Insufficient data: {sample_count} samples, need {required}")
        self.sample_count = sample_count
        self.required = required
