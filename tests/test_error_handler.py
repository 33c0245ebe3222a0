"""Tests for error classification."""

import httpx

from flow_state_monitor.core.exceptions import (
    InsufficientDataError,
    MalformedTelemetryError,
    SensorUnavailableError,
    TelemetryStoreError,
)
from flow_state_monitor.services.error_handler import ClassifiedError, ErrorCategory, ErrorHandler


class TestClassifiedError:
    """Tests for ClassifiedError."""

    def test_to_log_dict_merges_details(self) -> None:
        error = ClassifiedError(
            category=ErrorCategory.NETWORK_UNAVAILABLE,
            message="HTTP 503 from telemetry store",
            details={"status_code": 503},
        )

        assert error.to_log_dict() == {
            "category": "network_unavailable",
            "message": "HTTP 503 from telemetry store",
            "status_code": 503,
        }

    def test_report_hides_details(self) -> None:
        error = ClassifiedError(
            category=ErrorCategory.UNEXPECTED_FAULT,
            message="Unexpected error: KeyError: 'x'",
            details={"error": "'x'"},
        )

        assert error.to_report() == {
            "category": "unexpected_fault",
            "message": "Unexpected error: KeyError: 'x'",
        }


class TestErrorHandler:
    """Tests for ErrorHandler.classify."""

    def setup_method(self) -> None:
        self.handler = ErrorHandler()

    def test_sensor_unavailable(self) -> None:
        error = self.handler.classify(SensorUnavailableError("no optical sensor"))

        assert error.category is ErrorCategory.SENSOR_UNAVAILABLE
        assert "no optical sensor" in error.message

    def test_insufficient_data_carries_counts(self) -> None:
        error = self.handler.classify(InsufficientDataError(42, 100))

        assert error.category is ErrorCategory.INSUFFICIENT_DATA
        assert error.details["sample_count"] == 42
        assert error.details["required"] == 100

    def test_malformed_telemetry(self) -> None:
        error = self.handler.classify(MalformedTelemetryError("feeds is not a list"))

        assert error.category is ErrorCategory.MALFORMED_TELEMETRY

    def test_telemetry_store_error(self) -> None:
        exc = TelemetryStoreError("refused", endpoint="/update", status_code=400)

        error = self.handler.classify(exc)

        assert error.category is ErrorCategory.NETWORK_UNAVAILABLE
        assert error.details["endpoint"] == "/update"
        assert error.details["status_code"] == 400

    def test_http_status_error(self) -> None:
        request = httpx.Request("GET", "https://store.test/channels/42/feeds.json")
        response = httpx.Response(503, request=request)
        exc = httpx.HTTPStatusError("Service Unavailable", request=request, response=response)

        error = self.handler.classify(exc, context={"trigger": "scheduler"})

        assert error.category is ErrorCategory.NETWORK_UNAVAILABLE
        assert error.message == "HTTP 503 from telemetry store"
        assert error.details["status_code"] == 503
        assert error.details["trigger"] == "scheduler"

    def test_transport_error(self) -> None:
        error = self.handler.classify(httpx.ReadTimeout("read timed out"))

        assert error.category is ErrorCategory.NETWORK_UNAVAILABLE
        assert "ReadTimeout" in error.message

    def test_anything_else_is_unexpected(self) -> None:
        exc = ZeroDivisionError("division by zero")

        error = self.handler.classify(exc)

        assert error.category is ErrorCategory.UNEXPECTED_FAULT
        assert error.original_exception is exc
        assert error.details["error_type"] == "ZeroDivisionError"
