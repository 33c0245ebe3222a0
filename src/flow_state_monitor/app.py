"""Litestar application factory."""

import asyncio
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

import structlog
from litestar import Litestar
from litestar.datastructures import State
from litestar.openapi import OpenAPIConfig

from flow_state_monitor import __version__
from flow_state_monitor.api import api_routers
from flow_state_monitor.core.config import Settings, settings
from flow_state_monitor.core.logging import configure_logging
from flow_state_monitor.routes import root_redirect
from flow_state_monitor.sensing.node import NodeContext, SensingNode
from flow_state_monitor.sensing.source import SimulatedSource
from flow_state_monitor.services.error_handler import ErrorHandler
from flow_state_monitor.services.forecast import ForecastEngine
from flow_state_monitor.services.forecast_service import ForecastService
from flow_state_monitor.services.scheduler import ForecastScheduler
from flow_state_monitor.services.telemetry import TelemetryHistoryClient, TelemetryUploader

logger = structlog.get_logger()


def build_forecast_service(app_settings: Settings) -> ForecastService:
    """Wire the forecast service against the configured telemetry store."""
    tz = ZoneInfo(app_settings.timezone)
    return ForecastService(
        history=TelemetryHistoryClient(app_settings),
        engine=ForecastEngine(tz),
    )


def build_node(app_settings: Settings) -> SensingNode:
    """Wire a sensing node; only the simulated source ships with this package."""
    uploader = TelemetryUploader(app_settings) if app_settings.telemetry_write_key else None
    return SensingNode(
        source=SimulatedSource(),
        settings=app_settings,
        context=NodeContext(),
        uploader=uploader,
    )


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncIterator[None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks:
    - Start the forecast scheduler
    - Run the sensing node on a worker thread when configured
    - Stop both on shutdown
    """
    app_settings: Settings = app.state.settings
    scheduler: ForecastScheduler = app.state.forecast_scheduler
    node: SensingNode | None = app.state.get("node")

    logger.info(
        "Starting flow-state-monitor",
        version=__version__,
        forecast_enabled=app_settings.forecast_enabled,
        forecast_interval=app_settings.forecast_interval_minutes,
        node_enabled=node is not None,
    )

    await scheduler.start()

    stop = threading.Event()
    node_task = None
    if node is not None:
        # The node busy-waits during noise capture, so keep it off the event loop
        node_task = asyncio.create_task(asyncio.to_thread(node.run, stop))
        node_task.add_done_callback(_report_node_exit)

    try:
        yield
    finally:
        stop.set()
        try:
            if node_task is not None:
                # A node failure was already reported by the done callback
                await asyncio.gather(node_task, return_exceptions=True)
        finally:
            await scheduler.stop()
            logger.info("Shutdown complete")


def _report_node_exit(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        ErrorHandler().classify(exc, context={"component": "sensing_node"})
        logger.error("Sensing node thread exited", error=str(exc))


def create_app(
    app_settings: Settings | None = None,
    forecast_service: ForecastService | None = None,
    node: SensingNode | None = None,
) -> Litestar:
    """Create Litestar application.

    Args:
        app_settings: Settings to use (module settings by default)
        forecast_service: Prebuilt forecast service (built from settings by default)
        node: Prebuilt sensing node (built from settings when node_enabled)

    Returns:
        Configured Litestar app instance
    """
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level)

    service = forecast_service or build_forecast_service(app_settings)
    if node is None and app_settings.node_enabled:
        node = build_node(app_settings)

    state = State(
        {
            "settings": app_settings,
            "forecast_service": service,
            "forecast_scheduler": ForecastScheduler(service, app_settings),
            "node": node,
            "node_context": node.context if node is not None else None,
        }
    )

    return Litestar(
        route_handlers=[root_redirect, *api_routers],
        lifespan=[lifespan],
        state=state,
        openapi_config=OpenAPIConfig(
            title="flow-state-monitor API",
            version=__version__,
            description="Study-space flow state monitoring and forecasting",
        ),
        debug=app_settings.log_level == "DEBUG",
    )


# Application instance
app = create_app()
