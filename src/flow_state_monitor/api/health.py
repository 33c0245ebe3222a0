"""Health check endpoint."""

from typing import Any

from litestar import Router, get
from litestar.datastructures import State
from litestar.status_codes import HTTP_200_OK

from flow_state_monitor import __version__
from flow_state_monitor.sensing.node import NodeContext
from flow_state_monitor.services.scheduler import ForecastScheduler


def node_status(context: NodeContext | None) -> str:
    if context is None:
        return "disabled"
    return "running" if context.running else "stopped"


@get("/health", status_code=HTTP_200_OK, sync_to_thread=False)
def health_check(state: State) -> dict[str, Any]:
    """Health check endpoint.

    ``status`` is ``degraded`` when a configured sensing node is no longer
    running.

    Returns:
        Status, version, scheduler and sensing node liveness
    """
    scheduler: ForecastScheduler = state.forecast_scheduler
    context: NodeContext | None = state.get("node_context")
    node = node_status(context)

    return {
        "status": "degraded" if node == "stopped" else "ok",
        "version": __version__,
        "scheduler_running": scheduler.is_running,
        "node": node,
        "sensor_available": context.sensor_available if context is not None else None,
    }


health_router = Router(path="/", route_handlers=[health_check])
