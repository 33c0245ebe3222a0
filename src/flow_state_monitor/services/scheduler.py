"""Background forecast scheduler using APScheduler.

Architecture:
    The scheduler periodically triggers ForecastService.run. APScheduler is
    configured with max_instances=1 and coalesce=True so missed or
    overlapping ticks collapse into a single run; ForecastService adds its own
    busy guard so manual and startup triggers cannot overlap a scheduled run.

Configuration:
    FORECAST_ENABLED: Enable/disable the periodic forecast
    FORECAST_INTERVAL_MINUTES: How often to run (default: 60)
    FORECAST_ON_STARTUP: Whether to run immediately on startup

Usage:
    scheduler = ForecastScheduler(service, settings)
    await scheduler.start()
    ...
    await scheduler.stop()
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from flow_state_monitor.core.config import Settings
from flow_state_monitor.services.forecast_service import ForecastService, RunOutcome, RunTrigger

if TYPE_CHECKING:
    from apscheduler.job import Job

logger = structlog.get_logger()


class ForecastScheduler:
    """Periodic trigger for forecast runs.

    Attributes:
        service: Forecast service that performs the runs
        scheduler: APScheduler instance
        is_running: Whether scheduler is currently running
        last_run_at: Timestamp of last run attempt
        last_outcome: Outcome of last run attempt
    """

    def __init__(self, service: ForecastService, settings: Settings) -> None:
        self.service = service
        self.settings = settings
        self.scheduler = AsyncIOScheduler()
        self.is_running = False
        self.last_run_at: datetime | None = None
        self.last_outcome: RunOutcome | None = None
        self._job: Job | None = None
        self._startup_task: asyncio.Task[RunOutcome] | None = None
        self.logger = logger.bind(component="forecast_scheduler")

    async def start(self) -> None:
        """Start the background scheduler.

        If FORECAST_ON_STARTUP is enabled, triggers an immediate run.
        """
        if not self.settings.forecast_enabled:
            self.logger.info("Forecast scheduler disabled by configuration")
            return

        if self.is_running:
            self.logger.warning("Scheduler already running")
            return

        self.logger.info(
            "Starting forecast scheduler",
            interval_minutes=self.settings.forecast_interval_minutes,
            run_on_startup=self.settings.forecast_on_startup,
        )

        self._job = self.scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(minutes=self.settings.forecast_interval_minutes),
            id="flow_forecast",
            name="Flow state forecast",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        self.is_running = True

        if self.settings.forecast_on_startup:
            # Run in background to not block startup
            self._startup_task = asyncio.create_task(self.run_once(RunTrigger.STARTUP))

    async def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if not self.is_running:
            return

        self.logger.info("Stopping forecast scheduler")
        self.scheduler.shutdown(wait=False)
        if self._startup_task is not None and not self._startup_task.done():
            self._startup_task.cancel()
        self.is_running = False
        self.logger.info("Forecast scheduler stopped")

    async def run_once(self, trigger: RunTrigger = RunTrigger.SCHEDULER) -> RunOutcome:
        """Run one forecast; exceptions never escape into APScheduler."""
        outcome = await self.service.run(trigger)
        self.last_run_at = datetime.now(UTC)
        self.last_outcome = outcome
        return outcome

    def get_status(self) -> dict[str, Any]:
        """Get scheduler status for monitoring.

        Returns:
            Dict with scheduler state
        """
        next_run = None
        if self._job and self.is_running:
            next_run_time = self._job.next_run_time
            if next_run_time:
                next_run = next_run_time.isoformat()

        return {
            "enabled": self.settings.forecast_enabled,
            "is_running": self.is_running,
            "busy": self.service.is_busy,
            "interval_minutes": self.settings.forecast_interval_minutes,
            "next_run_at": next_run,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_outcome": self.last_outcome.value if self.last_outcome else None,
        }
