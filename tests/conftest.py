"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

from flow_state_monitor.core.config import Settings
from tests.fixtures.fakes import FakeClock


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment's telemetry credentials."""
    return Settings(
        telemetry_base_url="https://store.test",
        telemetry_channel_id="42",
        telemetry_write_key="write-key",
        telemetry_read_key="read-key",
        forecast_enabled=False,
        forecast_on_startup=False,
        node_enabled=False,
        noise_window_ms=0,
    )


@pytest.fixture
def fixed_now() -> datetime:
    """Sunday 2024-01-14 08:30 UTC."""
    return datetime(2024, 1, 14, 8, 30, tzinfo=UTC)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
