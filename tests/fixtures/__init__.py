"""Test fixtures for flow-state-monitor."""

from tests.fixtures.telemetry_seed import make_cell, make_feed, make_record

__all__ = [
    "make_cell",
    "make_feed",
    "make_record",
]
