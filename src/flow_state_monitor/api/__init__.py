"""API routes."""

from litestar import Router

from flow_state_monitor.api.forecast import forecast_router
from flow_state_monitor.api.health import health_router
from flow_state_monitor.api.readings import readings_router
from flow_state_monitor.core.config import settings

# Versioned API routers get the configured prefix; health stays at the root
api_v1_router = Router(path=settings.api_prefix, route_handlers=[forecast_router, readings_router])

api_routers = [health_router, api_v1_router]

__all__ = ["api_routers"]
