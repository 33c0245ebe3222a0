"""Tests for the four-quadrant state classifier."""

import pytest

from flow_state_monitor.classifier import classify, is_valid_bpm
from flow_state_monitor.models.state import ClassifiedState


class TestIsValidBpm:
    """Tests for the heart-rate validity range."""

    @pytest.mark.parametrize("bpm", [40, 70, 200])
    def test_inclusive_bounds_are_valid(self, bpm: int) -> None:
        assert is_valid_bpm(bpm)

    @pytest.mark.parametrize("bpm", [0, 39, 201])
    def test_outside_range_is_invalid(self, bpm: int) -> None:
        assert not is_valid_bpm(bpm)


class TestClassify:
    """Tests for classify()."""

    def test_quiet_and_optimal_rate_is_flow(self) -> None:
        assert classify(45.0, 70, 650) is ClassifiedState.FLOW_STATE

    def test_quiet_and_relaxed_interval_is_flow(self) -> None:
        """A long R-R interval counts as good physiology even at a high rate."""
        assert classify(45.0, 95, 750) is ClassifiedState.FLOW_STATE

    def test_noisy_with_good_physiology_is_normal_learning(self) -> None:
        assert classify(60.0, 70, 850) is ClassifiedState.NORMAL_LEARNING

    def test_quiet_with_poor_physiology_is_standby(self) -> None:
        assert classify(45.0, 95, 600) is ClassifiedState.STANDBY

    def test_noisy_with_poor_physiology_is_distracted(self) -> None:
        assert classify(65.0, 95, 600) is ClassifiedState.DISTRACTED

    def test_noise_threshold_is_exclusive(self) -> None:
        """55 dB is not quiet."""
        assert classify(55.0, 70, 850) is ClassifiedState.NORMAL_LEARNING

    def test_rr_threshold_is_exclusive(self) -> None:
        """Exactly 700 ms is not relaxed."""
        assert classify(45.0, 95, 700) is ClassifiedState.STANDBY

    @pytest.mark.parametrize("bpm", [60, 80])
    def test_optimal_rate_bounds_are_inclusive(self, bpm: int) -> None:
        assert classify(45.0, bpm, 0) is ClassifiedState.FLOW_STATE

    @pytest.mark.parametrize(
        ("noise_db", "bpm", "rr"),
        [
            (30.0, 0, 1000),
            (30.0, 39, 1000),
            (90.0, 201, 300),
            (45.0, 250, 850),
        ],
    )
    def test_invalid_heart_rate_is_always_standby(self, noise_db: float, bpm: int, rr: int) -> None:
        assert classify(noise_db, bpm, rr) is ClassifiedState.STANDBY

    def test_labels_match_stored_status_text(self) -> None:
        assert [state.value for state in ClassifiedState] == [
            "Flow State",
            "Normal Learning",
            "Standby",
            "Distracted",
        ]
