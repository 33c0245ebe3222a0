"""Tests for HRV statistics."""

import math

import pytest

from flow_state_monitor.sensing.hrv import compute_hrv, compute_rmssd, compute_sdnn


class TestHrv:
    """Tests for SDNN and RMSSD."""

    def test_fewer_than_five_intervals_gives_zero(self) -> None:
        assert compute_hrv([800, 900, 1000, 1100]) == (0.0, 0.0)
        assert compute_hrv([]) == (0.0, 0.0)

    def test_constant_intervals_give_zero(self) -> None:
        assert compute_hrv([1000] * 10) == (0.0, 0.0)

    def test_known_values(self) -> None:
        intervals = [800, 850, 900, 850, 800]

        # Mean 840, squared deviations sum to 7000 over 5 samples
        assert compute_sdnn(intervals) == pytest.approx(math.sqrt(1400))
        # Successive differences are +/-50
        assert compute_rmssd(intervals) == pytest.approx(50.0)

    def test_rmssd_depends_on_order(self) -> None:
        """Sorting the same intervals changes RMSSD but not SDNN."""
        alternating = [800, 1000, 800, 1000, 800, 1000]
        ordered = sorted(alternating)

        assert compute_sdnn(alternating) == pytest.approx(compute_sdnn(ordered))
        assert compute_rmssd(alternating) == pytest.approx(200.0)
        assert compute_rmssd(ordered) < compute_rmssd(alternating)
