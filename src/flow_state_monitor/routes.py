"""Root application routes."""

from litestar import get
from litestar.response import Redirect
from litestar.status_codes import HTTP_303_SEE_OTHER

from flow_state_monitor.core.config import settings


@get("/", include_in_schema=False)
async def root_redirect() -> Redirect:
    """Redirect root to the forecast snapshot."""
    return Redirect(path=f"{settings.api_prefix}/forecast", status_code=HTTP_303_SEE_OTHER)
