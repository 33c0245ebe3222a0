"""Tests for the noise sampler."""

import pytest

from flow_state_monitor.sensing.noise import NoiseSampler
from tests.fixtures.fakes import FakeClock


class TickingReader:
    """ADC read that takes 1 ms per sample and cycles through ``values``."""

    def __init__(self, clock: FakeClock, values: list[int]) -> None:
        self.clock = clock
        self.values = values
        self._index = 0

    def __call__(self) -> int:
        self.clock.advance(1)
        value = self.values[self._index % len(self.values)]
        self._index += 1
        return value


class TestNoiseSampler:
    """Tests for NoiseSampler."""

    def test_capture_returns_peak_to_peak_over_window(self, fake_clock: FakeClock) -> None:
        sampler = NoiseSampler(
            read=TickingReader(fake_clock, [2000, 2150, 1950]),
            window_ms=10,
            clock=fake_clock,
        )

        assert sampler.capture() == 200
        assert sampler.peak_to_peak == 200
        assert fake_clock.now == 10

    def test_empty_window_reads_zero(self, fake_clock: FakeClock) -> None:
        sampler = NoiseSampler(read=lambda: 4095, window_ms=0, clock=fake_clock)

        assert sampler.capture() == 0

    def test_to_db(self) -> None:
        sampler = NoiseSampler(read=lambda: 0, reference=1.0, floor_db=20.0)

        assert sampler.to_db(1) == pytest.approx(20.0)
        assert sampler.to_db(100) == pytest.approx(60.0)
        # Silence is clamped to the reference floor instead of -inf
        assert sampler.to_db(0) == pytest.approx(20.0)

    def test_first_sample_primes_then_smooths(self, fake_clock: FakeClock) -> None:
        reader = TickingReader(fake_clock, [2000, 2100])
        sampler = NoiseSampler(read=reader, window_ms=4, smoothing=0.5, clock=fake_clock)

        # 20 + 20 * log10(100)
        assert sampler.sample() == pytest.approx(60.0)

        reader.values = [2000]
        # Flat window maps to 20 dB; smoothed halfway from 60 dB
        assert sampler.sample() == pytest.approx(40.0)
        assert sampler.level_db == pytest.approx(40.0)
