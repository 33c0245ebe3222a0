"""Flow state forecasting from aggregated historical patterns.

For each of the next PREDICTION_WINDOW_HOURS hours, the matching
(day-of-week, hour-of-day) cell is looked up. Cells whose flow probability
clears FLOW_PROBABILITY_THRESHOLD and that have enough samples become
predictions, scored by probability x confidence and cut to the top
TOP_PREDICTIONS.

Confidence (0-100) weights three factors:
- Sample size: min(samples / 50, 1) x 0.4
- Consistency: cell consistency x 0.3
- Probability: flow probability x 0.3
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta, tzinfo
from statistics import fmean

import structlog

from flow_state_monitor.core.numeric import round_half_up
from flow_state_monitor.models.pattern import PatternCell
from flow_state_monitor.models.prediction import ForecastResult, Prediction
from flow_state_monitor.models.state import DataQuality
from flow_state_monitor.models.telemetry import TelemetryRecord, day_of_week
from flow_state_monitor.services.pattern import PatternAggregator, PatternGrid

logger = structlog.get_logger()

PREDICTION_WINDOW_HOURS = 24
MIN_DATA_POINTS = 100
FLOW_PROBABILITY_THRESHOLD = 0.3
TOP_PREDICTIONS = 5

MIN_SAMPLES_FOR_CONFIDENCE = 10
IDEAL_CELL_SAMPLES = 50
IDEAL_TOTAL_SAMPLES = 500


def prediction_confidence(cell: PatternCell) -> int:
    """Confidence (0-100) for a single cell; 0 below the minimum sample count."""
    if cell.sample_count < MIN_SAMPLES_FOR_CONFIDENCE:
        return 0

    sample_factor = min(cell.sample_count / IDEAL_CELL_SAMPLES, 1.0)
    confidence = (
        sample_factor * 0.4 + cell.consistency * 0.3 + cell.probability * 0.3
    ) * 100
    return round_half_up(confidence)


def overall_confidence(predictions: Sequence[Prediction], total_samples: int) -> int:
    """Blend mean prediction confidence with the amount of history."""
    if not predictions:
        return 0
    avg_confidence = fmean(p.confidence for p in predictions)
    data_factor = min(total_samples / IDEAL_TOTAL_SAMPLES, 1.0)
    return round_half_up(avg_confidence * 0.7 + data_factor * 30)


def assess_data_quality(total_samples: int) -> DataQuality:
    """Label the history volume."""
    if total_samples < 100:
        return DataQuality.INSUFFICIENT
    if total_samples < 300:
        return DataQuality.LOW
    if total_samples < 800:
        return DataQuality.MODERATE
    if total_samples < 1500:
        return DataQuality.GOOD
    return DataQuality.EXCELLENT


class ForecastEngine:
    """Turn historical records into ranked flow-state predictions."""

    def __init__(self, tz: tzinfo = UTC, aggregator: PatternAggregator | None = None) -> None:
        """Initialize engine.

        Args:
            tz: Timezone for projecting future hours onto day/hour cells
            aggregator: Pattern aggregator (a fresh one by default)
        """
        self.tz = tz
        self.aggregator = aggregator or PatternAggregator()
        self.logger = logger.bind(service="forecast_engine")

    def forecast(self, records: Sequence[TelemetryRecord], now: datetime) -> ForecastResult:
        """Run a full forecast over a history window.

        Histories below MIN_DATA_POINTS short-circuit before aggregation.

        Args:
            records: Valid historical records
            now: Current time (timezone-aware)

        Returns:
            ForecastResult with predictions, overall confidence and data quality
        """
        total = len(records)
        quality = assess_data_quality(total)

        if total < MIN_DATA_POINTS:
            self.logger.info(
                "Insufficient data for forecast",
                samples=total,
                required=MIN_DATA_POINTS,
            )
            return ForecastResult(
                predictions=(),
                confidence=0,
                data_quality=quality,
                sample_count=total,
            )

        grid = self.aggregator.aggregate(records)
        predictions = self.generate(grid, now)

        return ForecastResult(
            predictions=tuple(predictions),
            confidence=overall_confidence(predictions, total),
            data_quality=quality,
            sample_count=total,
        )

    def generate(self, grid: PatternGrid, now: datetime) -> list[Prediction]:
        """Score the next PREDICTION_WINDOW_HOURS hours against the grid.

        Args:
            grid: Aggregated pattern cells
            now: Current time (timezone-aware)

        Returns:
            Up to TOP_PREDICTIONS predictions, best first
        """
        start = now.astimezone(UTC)
        candidates: list[Prediction] = []

        for hours_ahead in range(1, PREDICTION_WINDOW_HOURS + 1):
            target = (start + timedelta(hours=hours_ahead)).astimezone(self.tz)
            cell = grid.get((day_of_week(target), target.hour))
            if cell is None or cell.probability < FLOW_PROBABILITY_THRESHOLD:
                continue
            if cell.sample_count < MIN_SAMPLES_FOR_CONFIDENCE:
                continue

            candidates.append(
                Prediction(
                    target_time=target,
                    hour_of_day=target.hour,
                    day_of_week=day_of_week(target),
                    probability=cell.probability,
                    confidence=prediction_confidence(cell),
                    expected_noise=cell.avg_noise,
                    expected_bpm=cell.avg_bpm,
                    expected_rr=cell.avg_rr,
                    sample_count=cell.sample_count,
                    consistency=cell.consistency,
                    hours_from_now=hours_ahead,
                )
            )

        # sorted() is stable, so equal scores keep chronological order
        ranked = sorted(candidates, key=lambda p: p.score, reverse=True)
        return ranked[:TOP_PREDICTIONS]
