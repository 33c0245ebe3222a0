"""Error classification for the sensing node and forecast runs.

Nothing here is fatal: every failure degrades to a reported condition.

Error Classification:

    SENSOR_UNAVAILABLE: Signal source failed to initialise; the node keeps
        running with heart metrics at zero.
    NETWORK_UNAVAILABLE: Telemetry store unreachable, timed out or returned
        an error status; the point or fetch is skipped, never retried.
    INSUFFICIENT_DATA: Not enough history; the run reports progress instead.
    MALFORMED_TELEMETRY: Store response could not be interpreted.
    UNEXPECTED_FAULT: Anything else raised inside a forecast run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

from flow_state_monitor.core.exceptions import (
    InsufficientDataError,
    MalformedTelemetryError,
    SensorUnavailableError,
    TelemetryStoreError,
)

logger = structlog.get_logger()


class ErrorCategory(str, Enum):
    """Reported failure categories."""

    SENSOR_UNAVAILABLE = "sensor_unavailable"
    NETWORK_UNAVAILABLE = "network_unavailable"
    INSUFFICIENT_DATA = "insufficient_data"
    MALFORMED_TELEMETRY = "malformed_telemetry"
    UNEXPECTED_FAULT = "unexpected_fault"


@dataclass
class ClassifiedError:
    """Structured error with its category.

    Attributes:
        category: Reported failure category
        message: Human-readable error message
        details: Additional error context
        original_exception: The exception that caused this error
    """

    category: ErrorCategory
    message: str
    details: dict[str, Any]
    original_exception: Exception | None = None

    def to_log_dict(self) -> dict[str, Any]:
        """Convert to dict for structured logging.

        Returns:
            Dict suitable for structlog context
        """
        return {
            "category": self.category.value,
            "message": self.message,
            **self.details,
        }

    def to_report(self) -> dict[str, Any]:
        """Public shape exposed through the API."""
        return {"category": self.category.value, "message": self.message}


class ErrorHandler:
    """Classify exceptions into ErrorCategory values.

    Usage:
        handler = ErrorHandler()

        try:
            records = await history.fetch_records(tz)
        except Exception as e:
            error = handler.classify(e, context={"run": "scheduled"})
            publish_error(error.to_report())
    """

    def __init__(self) -> None:
        self.logger = logger.bind(component="error_handler")

    def classify(
        self,
        exception: Exception,
        context: dict[str, Any] | None = None,
    ) -> ClassifiedError:
        """Classify an exception.

        Args:
            exception: The exception to classify
            context: Additional context (trigger, endpoint, etc.)

        Returns:
            ClassifiedError with category and details
        """
        context = context or {}

        if isinstance(exception, SensorUnavailableError):
            return self._build(
                ErrorCategory.SENSOR_UNAVAILABLE,
                f"Sensor unavailable: {exception}",
                exception,
                context,
            )
        if isinstance(exception, InsufficientDataError):
            return self._build(
                ErrorCategory.INSUFFICIENT_DATA,
                str(exception),
                exception,
                {"sample_count": exception.sample_count, "required": exception.required, **context},
                level="info",
            )
        if isinstance(exception, MalformedTelemetryError):
            return self._build(
                ErrorCategory.MALFORMED_TELEMETRY,
                f"Malformed telemetry: {exception}",
                exception,
                context,
            )
        if isinstance(exception, TelemetryStoreError):
            return self._build(
                ErrorCategory.NETWORK_UNAVAILABLE,
                f"Telemetry store error: {exception}",
                exception,
                {"endpoint": exception.endpoint, "status_code": exception.status_code, **context},
            )
        if isinstance(exception, httpx.HTTPStatusError):
            return self._handle_http_status(exception, context)
        if isinstance(exception, httpx.HTTPError):
            return self._build(
                ErrorCategory.NETWORK_UNAVAILABLE,
                f"Telemetry store unreachable: {type(exception).__name__}: {exception}",
                exception,
                context,
            )

        self.logger.exception(
            "Unexpected error",
            error_type=type(exception).__name__,
            error=str(exception),
            **context,
        )
        return ClassifiedError(
            category=ErrorCategory.UNEXPECTED_FAULT,
            message=f"Unexpected error: {type(exception).__name__}: {exception}",
            details={
                "error_type": type(exception).__name__,
                "error": str(exception)[:500],
                **context,
            },
            original_exception=exception,
        )

    def _handle_http_status(
        self,
        exception: httpx.HTTPStatusError,
        context: dict[str, Any],
    ) -> ClassifiedError:
        status_code = exception.response.status_code
        return self._build(
            ErrorCategory.NETWORK_UNAVAILABLE,
            f"HTTP {status_code} from telemetry store",
            exception,
            {"status_code": status_code, "url": str(exception.request.url), **context},
        )

    def _build(
        self,
        category: ErrorCategory,
        message: str,
        exception: Exception,
        details: dict[str, Any],
        level: str = "warning",
    ) -> ClassifiedError:
        error = ClassifiedError(
            category=category,
            message=message,
            details={"error_type": type(exception).__name__, **details},
            original_exception=exception,
        )
        getattr(self.logger, level)("Classified error", **error.to_log_dict())
        return error
