"""Live sensing node readings."""

from litestar import Router, get
from litestar.datastructures import State
from litestar.exceptions import ServiceUnavailableException
from litestar.status_codes import HTTP_200_OK

from flow_state_monitor.schemas.readings import ReadingsOut
from flow_state_monitor.sensing.node import NodeContext


@get("/readings", status_code=HTTP_200_OK, sync_to_thread=False)
def get_readings(state: State) -> ReadingsOut:
    """Get the current readings of the sensing node.

    Raises:
        ServiceUnavailableException: If no sensing node runs in this process
    """
    context: NodeContext | None = state.get("node_context")
    if context is None:
        raise ServiceUnavailableException("Sensing node is not running in this process")
    return ReadingsOut.from_reading(context.reading, sensor_available=context.sensor_available)


readings_router = Router(path="/", route_handlers=[get_readings], tags=["Readings"])
