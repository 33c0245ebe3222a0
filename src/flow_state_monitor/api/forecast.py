"""Flow state forecast API endpoints."""

from typing import Any

from litestar import Router, get, post
from litestar.datastructures import State
from litestar.status_codes import HTTP_200_OK

from flow_state_monitor.schemas.forecast import ForecastOut
from flow_state_monitor.services.forecast_service import ForecastService, RunTrigger
from flow_state_monitor.services.scheduler import ForecastScheduler


@get("/forecast", status_code=HTTP_200_OK, sync_to_thread=False)
def get_forecast(state: State) -> ForecastOut:
    """Get the latest forecast snapshot.

    Returns the top predicted flow-state windows for the next 24 hours with
    overall confidence and data-quality label. While history is still too
    short, ``status`` is ``collecting`` and ``progress`` reports how far along
    collection is.
    """
    service: ForecastService = state.forecast_service
    return ForecastOut.from_snapshot(service.snapshot)


@post("/forecast/run", status_code=HTTP_200_OK)
async def run_forecast(state: State) -> dict[str, Any]:
    """Trigger a forecast run outside the schedule.

    If a run is already in progress the trigger is discarded and the outcome
    is ``skipped``.
    """
    service: ForecastService = state.forecast_service
    outcome = await service.run(RunTrigger.MANUAL)
    return {
        "outcome": outcome.value,
        "forecast": ForecastOut.from_snapshot(service.snapshot).model_dump(mode="json"),
    }


@get("/forecast/status", status_code=HTTP_200_OK, sync_to_thread=False)
def get_forecast_status(state: State) -> dict[str, Any]:
    """Get forecast scheduler status."""
    scheduler: ForecastScheduler = state.forecast_scheduler
    return scheduler.get_status()


forecast_router = Router(
    path="/",
    route_handlers=[get_forecast, run_forecast, get_forecast_status],
    tags=["Forecast"],
)
