"""Forecast run orchestration.

A run fetches the history window, gates on the minimum sample count, runs
the engine and publishes a new ForecastSnapshot. At most one run is in
flight at a time; a trigger arriving while a run is active is discarded.

The snapshot is immutable and replaced in a single assignment, so readers
never observe a half-updated prediction set.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, tzinfo
from enum import Enum
from typing import Protocol

import structlog

from flow_state_monitor.core.exceptions import InsufficientDataError
from flow_state_monitor.models.prediction import CollectionProgress, ForecastSnapshot
from flow_state_monitor.models.state import DataQuality, ForecastStatus
from flow_state_monitor.models.telemetry import TelemetryRecord
from flow_state_monitor.services.error_handler import ErrorCategory, ErrorHandler
from flow_state_monitor.services.forecast import MIN_DATA_POINTS, ForecastEngine

logger = structlog.get_logger()


class HistorySource(Protocol):
    """Anything able to produce cleaned historical records."""

    async def fetch_records(self, tz: tzinfo) -> list[TelemetryRecord]: ...


class RunTrigger(str, Enum):
    """What started a forecast run."""

    SCHEDULER = "scheduler"
    STARTUP = "startup"
    MANUAL = "manual"


class RunOutcome(str, Enum):
    """Result of a call to ForecastService.run."""

    COMPLETED = "completed"
    INSUFFICIENT = "insufficient"
    FAILED = "failed"
    SKIPPED = "skipped"  # Another run was already in progress


class ForecastService:
    """Owns the forecast snapshot and serialises forecast runs.

    Attributes:
        history: Source of historical records
        engine: Forecast engine
        tz: Timezone used for binning and projection
        last_outcome: Outcome of the most recent run attempt
    """

    def __init__(
        self,
        history: HistorySource,
        engine: ForecastEngine | None = None,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
        error_handler: ErrorHandler | None = None,
    ) -> None:
        self.history = history
        self.engine = engine or ForecastEngine(tz or UTC)
        self.tz = self.engine.tz
        self._clock = clock or (lambda: datetime.now(self.tz))
        self.error_handler = error_handler or ErrorHandler()
        self._snapshot = ForecastSnapshot()
        self._busy = False
        self.last_outcome: RunOutcome | None = None
        self.logger = logger.bind(service="forecast")

    @property
    def snapshot(self) -> ForecastSnapshot:
        return self._snapshot

    @property
    def is_busy(self) -> bool:
        return self._busy

    async def run(self, trigger: RunTrigger = RunTrigger.SCHEDULER) -> RunOutcome:
        """Execute one forecast run unless one is already active.

        Args:
            trigger: What triggered this run

        Returns:
            RunOutcome describing what happened
        """
        if self._busy:
            self.logger.warning(
                "Forecast already running, trigger discarded",
                trigger=trigger.value,
            )
            return RunOutcome.SKIPPED

        self._busy = True
        try:
            outcome = await self._run(trigger)
        finally:
            self._busy = False

        self.last_outcome = outcome
        return outcome

    async def _run(self, trigger: RunTrigger) -> RunOutcome:
        self.logger.info("Starting flow state forecast", trigger=trigger.value)
        now = self._clock()

        records: list[TelemetryRecord] = []
        try:
            records = await self.history.fetch_records(self.tz)
            if len(records) < MIN_DATA_POINTS:
                raise InsufficientDataError(len(records), MIN_DATA_POINTS)

            result = self.engine.forecast(records, now)
        except Exception as e:
            error = self.error_handler.classify(e, context={"trigger": trigger.value})
            if error.category is ErrorCategory.INSUFFICIENT_DATA:
                self._publish_collecting(len(records), now)
                return RunOutcome.INSUFFICIENT
            self._publish_error(error.to_report())
            return RunOutcome.FAILED

        self._snapshot = ForecastSnapshot(
            status=ForecastStatus.READY,
            predictions=result.predictions,
            confidence=result.confidence,
            data_quality=result.data_quality,
            sample_count=result.sample_count,
            last_update=now,
        )

        self.logger.info(
            "Forecast complete",
            predictions=len(result.predictions),
            confidence=result.confidence,
            data_quality=result.data_quality.value,
            samples=result.sample_count,
        )
        return RunOutcome.COMPLETED

    def _publish_collecting(self, sample_count: int, now: datetime) -> None:
        progress = CollectionProgress(current=sample_count, required=MIN_DATA_POINTS)
        self._snapshot = ForecastSnapshot(
            status=ForecastStatus.COLLECTING,
            data_quality=DataQuality.INSUFFICIENT,
            sample_count=sample_count,
            last_update=now,
            progress=progress,
        )
        self.logger.info(
            "Collecting historical data",
            current=progress.current,
            required=progress.required,
            percent=progress.percent,
            estimated_hours=progress.estimated_hours,
        )

    def _publish_error(self, report: dict[str, str]) -> None:
        # Keep the last good prediction set; only the status and error change
        self._snapshot = replace(self._snapshot, status=ForecastStatus.ERROR, error=report)
