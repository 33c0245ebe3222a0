"""CLI entry point for flow-state-monitor."""

import asyncio

import typer
import uvicorn

from flow_state_monitor import __version__
from flow_state_monitor.core.config import settings
from flow_state_monitor.core.logging import configure_logging

app = typer.Typer(
    name="flow-state-monitor",
    help="Study-space flow state monitoring and forecasting",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server and the forecast scheduler.

    Example:
        flow-state-monitor serve
        flow-state-monitor serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "flow_state_monitor.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def node(
    duration: float = typer.Option(None, help="Stop after this many seconds"),
    heart_rate: float = typer.Option(68.0, help="Simulated heart rate (BPM)"),
    upload: bool = typer.Option(True, help="Upload telemetry when a write key is configured"),
) -> None:
    """Run the sensing node loop against the simulated signal source.

    Example:
        flow-state-monitor node --duration 60 --no-upload
    """
    from flow_state_monitor.sensing.node import SensingNode
    from flow_state_monitor.sensing.source import SimulatedSource
    from flow_state_monitor.services.telemetry import TelemetryUploader

    configure_logging(settings.log_level)
    uploader = TelemetryUploader(settings) if upload and settings.telemetry_write_key else None
    sensing_node = SensingNode(
        source=SimulatedSource(heart_rate=heart_rate),
        settings=settings,
        uploader=uploader,
    )
    try:
        sensing_node.run(duration_s=duration)
    except KeyboardInterrupt:
        typer.echo("Stopped.")


@app.command()
def forecast() -> None:
    """Run one forecast against the telemetry store and print it as JSON."""
    from flow_state_monitor.app import build_forecast_service
    from flow_state_monitor.schemas.forecast import ForecastOut
    from flow_state_monitor.services.forecast_service import RunOutcome, RunTrigger

    configure_logging(settings.log_level)
    service = build_forecast_service(settings)
    outcome = asyncio.run(service.run(RunTrigger.MANUAL))
    typer.echo(ForecastOut.from_snapshot(service.snapshot).model_dump_json(indent=2))
    if outcome is RunOutcome.FAILED:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"flow-state-monitor v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
