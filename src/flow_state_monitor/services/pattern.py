"""Temporal pattern aggregation over historical telemetry."""

import math
from collections.abc import Iterable

import structlog

from flow_state_monitor.models.pattern import DAYS_PER_WEEK, HOURS_PER_DAY, PatternCell
from flow_state_monitor.models.telemetry import TelemetryRecord

logger = structlog.get_logger()

PatternGrid = dict[tuple[int, int], PatternCell]


def empty_grid() -> PatternGrid:
    """All 168 (day, hour) cells with zeroed accumulators."""
    return {
        (day, hour): PatternCell(day_of_week=day, hour_of_day=hour)
        for day in range(DAYS_PER_WEEK)
        for hour in range(HOURS_PER_DAY)
    }


class PatternAggregator:
    """Bin historical telemetry by day-of-week x hour-of-day.

    Each run starts from an empty grid, so aggregating the same records twice
    yields identical cells.
    """

    def __init__(self) -> None:
        self.logger = logger.bind(service="pattern")

    def aggregate(self, records: Iterable[TelemetryRecord]) -> PatternGrid:
        """Aggregate records into the 168-cell grid.

        Args:
            records: Cleaned historical telemetry

        Returns:
            Grid keyed by (day_of_week, hour_of_day)
        """
        grid = empty_grid()
        outcomes: dict[tuple[int, int], list[int]] = {key: [] for key in grid}

        for record in records:
            key = (record.day_of_week, record.hour_of_day)
            cell = grid.get(key)
            if cell is None:
                continue
            cell.sample_count += 1
            cell.noise_sum += record.noise_db
            cell.bpm_sum += record.bpm
            cell.rr_sum += record.rr_interval_ms
            if record.is_flow_state:
                cell.flow_count += 1
            outcomes[key].append(1 if record.is_flow_state else 0)

        for key, cell in grid.items():
            self._finalize(cell, outcomes[key])

        populated = sum(1 for cell in grid.values() if cell.sample_count)
        self.logger.debug("Pattern analysis complete", slots=len(grid), populated=populated)
        return grid

    @staticmethod
    def _finalize(cell: PatternCell, outcomes: list[int]) -> None:
        """Derive probability, averages and consistency from the accumulators."""
        if cell.sample_count == 0:
            return

        count = cell.sample_count
        cell.avg_noise = cell.noise_sum / count
        cell.avg_bpm = cell.bpm_sum / count
        cell.avg_rr = cell.rr_sum / count
        cell.probability = cell.flow_count / count

        # Population variance of the flow indicator; never clamped
        variance = sum((outcome - cell.probability) ** 2 for outcome in outcomes) / count
        cell.consistency = 1 - math.sqrt(variance)
