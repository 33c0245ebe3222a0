"""API endpoint tests."""

import asyncio
from datetime import datetime

import pytest
from litestar import Litestar
from litestar.status_codes import HTTP_200_OK, HTTP_303_SEE_OTHER, HTTP_503_SERVICE_UNAVAILABLE
from litestar.testing import AsyncTestClient

from flow_state_monitor import __version__
from flow_state_monitor.app import create_app
from flow_state_monitor.core.config import Settings
from flow_state_monitor.sensing.node import SensingNode
from flow_state_monitor.services.forecast_service import ForecastService
from tests.fixtures.fakes import FakeHistory, ScriptedSource
from tests.fixtures.telemetry_seed import make_cell


@pytest.fixture
def history() -> FakeHistory:
    return FakeHistory(make_cell(0, 10, total=20, flow=16) + make_cell(3, 12, total=100, flow=0))


@pytest.fixture
def app(test_settings: Settings, history: FakeHistory, fixed_now: datetime) -> Litestar:
    """App with an in-memory history source and no sensing node."""
    service = ForecastService(history=history, clock=lambda: fixed_now)
    return create_app(test_settings, forecast_service=service)


async def test_health_check(app: Litestar) -> None:
    """Test health check endpoint."""
    async with AsyncTestClient(app=app) as client:
        response = await client.get("/health")

    assert response.status_code == HTTP_200_OK
    assert response.json() == {
        "status": "ok",
        "version": __version__,
        "scheduler_running": False,
        "node": "disabled",
        "sensor_available": None,
    }


async def test_root_redirects_to_forecast(app: Litestar) -> None:
    async with AsyncTestClient(app=app) as client:
        response = await client.get("/", follow_redirects=False)

    assert response.status_code == HTTP_303_SEE_OTHER
    assert response.headers["location"] == "/api/v1/forecast"


async def test_forecast_is_pending_before_first_run(app: Litestar) -> None:
    async with AsyncTestClient(app=app) as client:
        response = await client.get("/api/v1/forecast")

    assert response.status_code == HTTP_200_OK
    data = response.json()
    assert data["status"] == "pending"
    assert data["predictions"] == []
    assert data["data_quality"] == "insufficient"
    assert data["last_update"] is None


async def test_manual_run_publishes_predictions(app: Litestar, history: FakeHistory) -> None:
    async with AsyncTestClient(app=app) as client:
        run = await client.post("/api/v1/forecast/run")
        snapshot = await client.get("/api/v1/forecast")

    assert run.status_code == HTTP_200_OK
    assert run.json()["outcome"] == "completed"
    assert history.calls == 1

    data = snapshot.json()
    assert data["status"] == "ready"
    assert data["sample_count"] == 120
    assert data["data_quality"] == "low"
    assert len(data["predictions"]) == 1

    prediction = data["predictions"][0]
    assert prediction["day_of_week"] == 0
    assert prediction["hour_of_day"] == 10
    assert prediction["hours_from_now"] == 2
    assert prediction["confidence"] == 58
    assert prediction["confidence_class"] == "medium"
    assert prediction["probability"] == pytest.approx(0.8)


async def test_collecting_forecast_reports_progress(
    test_settings: Settings, fixed_now: datetime
) -> None:
    service = ForecastService(
        history=FakeHistory(make_cell(2, 9, total=40, flow=10)),
        clock=lambda: fixed_now,
    )
    app = create_app(test_settings, forecast_service=service)

    async with AsyncTestClient(app=app) as client:
        run = await client.post("/api/v1/forecast/run")

    assert run.json()["outcome"] == "insufficient"
    forecast = run.json()["forecast"]
    assert forecast["status"] == "collecting"
    assert forecast["progress"] == {
        "current": 40,
        "required": 100,
        "percent": 40,
        "samples_needed": 60,
        "estimated_hours": 5,
    }


async def test_failed_run_reports_error(test_settings: Settings, fixed_now: datetime) -> None:
    service = ForecastService(
        history=FakeHistory(error=ConnectionError("store unreachable")),
        clock=lambda: fixed_now,
    )
    app = create_app(test_settings, forecast_service=service)

    async with AsyncTestClient(app=app) as client:
        run = await client.post("/api/v1/forecast/run")

    assert run.json()["outcome"] == "failed"
    forecast = run.json()["forecast"]
    assert forecast["status"] == "error"
    assert forecast["error"]["category"] == "unexpected_fault"


async def test_forecast_status(app: Litestar) -> None:
    async with AsyncTestClient(app=app) as client:
        response = await client.get("/api/v1/forecast/status")

    assert response.status_code == HTTP_200_OK
    data = response.json()
    assert data["enabled"] is False
    assert data["is_running"] is False
    assert data["busy"] is False
    assert data["interval_minutes"] == 60


async def test_readings_unavailable_without_node(app: Litestar) -> None:
    async with AsyncTestClient(app=app) as client:
        response = await client.get("/api/v1/readings")

    assert response.status_code == HTTP_503_SERVICE_UNAVAILABLE


async def test_readings_from_running_node(
    test_settings: Settings, history: FakeHistory, fixed_now: datetime
) -> None:
    node = SensingNode(ScriptedSource([1200]), test_settings)
    service = ForecastService(history=history, clock=lambda: fixed_now)
    app = create_app(test_settings, forecast_service=service, node=node)

    async with AsyncTestClient(app=app) as client:
        response = await client.get("/api/v1/readings")

    assert response.status_code == HTTP_200_OK
    data = response.json()
    assert data["status"] == "Standby"
    assert data["finger_detected"] is False
    assert data["heart_rate_average"] == 0
    assert data["sensor_available"] is True


class BrokenSource(ScriptedSource):
    """Source whose bus faults in a way the node does not expect."""

    def __init__(self) -> None:
        super().__init__([60000])
        self.opened = False

    def open(self) -> None:
        self.opened = True
        raise RuntimeError("bus fault")


async def test_node_failure_is_reported_and_shutdown_completes(
    test_settings: Settings, history: FakeHistory, fixed_now: datetime
) -> None:
    settings = test_settings.model_copy(update={"forecast_enabled": True})
    source = BrokenSource()
    node = SensingNode(source, settings)
    service = ForecastService(history=history, clock=lambda: fixed_now)
    app = create_app(settings, forecast_service=service, node=node)
    scheduler = app.state.forecast_scheduler

    async with AsyncTestClient(app=app) as client:
        for _ in range(200):
            if source.opened and not node.context.running:
                break
            await asyncio.sleep(0.01)
        assert scheduler.is_running
        response = await client.get("/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["node"] == "stopped"
    assert data["scheduler_running"] is True
    assert scheduler.is_running is False
