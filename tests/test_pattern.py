"""Tests for temporal pattern aggregation."""

import math

import pytest

from flow_state_monitor.models.pattern import PatternCell
from flow_state_monitor.services.pattern import PatternAggregator, empty_grid
from tests.fixtures.telemetry_seed import make_cell, make_record


class TestEmptyGrid:
    """Tests for the empty 168-cell grid."""

    def test_covers_every_day_and_hour(self) -> None:
        grid = empty_grid()

        assert len(grid) == 168
        assert set(grid) == {(d, h) for d in range(7) for h in range(24)}
        assert all(isinstance(cell, PatternCell) for cell in grid.values())

    def test_keys_match_cells(self) -> None:
        for key, cell in empty_grid().items():
            assert cell.key == key


class TestPatternAggregator:
    """Tests for PatternAggregator."""

    def test_empty_history_gives_zeroed_grid(self) -> None:
        grid = PatternAggregator().aggregate([])

        assert len(grid) == 168
        assert all(cell.sample_count == 0 for cell in grid.values())
        assert all(cell.probability == 0.0 for cell in grid.values())

    def test_cell_statistics(self) -> None:
        records = make_cell(day=2, hour=9, total=20, flow=8)
        cell = PatternAggregator().aggregate(records)[(2, 9)]

        assert cell.sample_count == 20
        assert cell.flow_count == 8
        assert cell.probability == pytest.approx(0.4)
        assert cell.consistency == pytest.approx(1 - math.sqrt(0.24))
        assert cell.avg_noise == pytest.approx((8 * 45.0 + 12 * 65.0) / 20)
        assert cell.avg_bpm == pytest.approx((8 * 70 + 12 * 95) / 20)
        assert cell.avg_rr == pytest.approx((8 * 850.0 + 12 * 600.0) / 20)

    def test_uniform_outcomes_are_fully_consistent(self) -> None:
        records = make_cell(day=0, hour=10, total=12, flow=12)
        records += make_cell(day=0, hour=11, total=12, flow=0)
        grid = PatternAggregator().aggregate(records)

        assert grid[(0, 10)].probability == 1.0
        assert grid[(0, 10)].consistency == pytest.approx(1.0)
        assert grid[(0, 11)].probability == 0.0
        assert grid[(0, 11)].consistency == pytest.approx(1.0)

    def test_evenly_split_cell_has_half_consistency(self) -> None:
        cell = PatternAggregator().aggregate(make_cell(day=5, hour=20, total=10, flow=5))[(5, 20)]

        assert cell.consistency == pytest.approx(0.5)

    def test_records_only_touch_their_own_cell(self) -> None:
        grid = PatternAggregator().aggregate([make_record(day=3, hour=14, flow=True)])

        populated = [key for key, cell in grid.items() if cell.sample_count]
        assert populated == [(3, 14)]

    def test_aggregation_is_idempotent(self) -> None:
        """Each run starts from an empty grid; nothing accumulates across runs."""
        aggregator = PatternAggregator()
        records = make_cell(day=1, hour=8, total=15, flow=6) + make_cell(
            day=4, hour=16, total=30, flow=27
        )

        first = aggregator.aggregate(records)
        second = aggregator.aggregate(records)

        assert first == second
        assert second[(1, 8)].sample_count == 15
