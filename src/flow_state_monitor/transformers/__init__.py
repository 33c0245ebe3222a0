"""Telemetry payload <-> domain model transformers."""

from flow_state_monitor.transformers.telemetry import TelemetryTransformer

__all__ = ["TelemetryTransformer"]
