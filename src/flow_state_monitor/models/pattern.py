"""Aggregated day-of-week x hour-of-day statistics."""

from dataclasses import dataclass

DAYS_PER_WEEK = 7
HOURS_PER_DAY = 24


@dataclass
class PatternCell:
    """Historical statistics for one (day_of_week, hour_of_day) bucket.

    Accumulators are filled by the aggregator; derived fields are set once
    accumulation has finished.
    """

    day_of_week: int
    hour_of_day: int
    sample_count: int = 0
    flow_count: int = 0
    noise_sum: float = 0.0
    bpm_sum: float = 0.0
    rr_sum: float = 0.0
    probability: float = 0.0
    consistency: float = 0.0
    avg_noise: float = 0.0
    avg_bpm: float = 0.0
    avg_rr: float = 0.0

    @property
    def key(self) -> tuple[int, int]:
        return (self.day_of_week, self.hour_of_day)
