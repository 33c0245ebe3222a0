"""Ambient noise level from a microphone channel.

Each sample is a bounded busy-wait: the channel is polled for ``window_ms``
and the peak-to-peak envelope over that window is converted to dB and
smoothed. Nothing else on the node runs during the window.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class NoiseSampler:
    """Capture peak-to-peak noise amplitude and keep a smoothed dB level.

    Args:
        read: Callable returning one raw ADC sample
        window_ms: Capture window length
        reference: Peak-to-peak count that maps to ``floor_db``
        floor_db: dB value reported at the reference amplitude
        smoothing: Weight of the newest sample in the exponential average
        clock: Monotonic clock in milliseconds
    """

    def __init__(
        self,
        read: Callable[[], int],
        window_ms: int = 50,
        reference: float = 1.0,
        floor_db: float = 20.0,
        smoothing: float = 0.2,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self._read = read
        self.window_ms = window_ms
        self.reference = reference
        self.floor_db = floor_db
        self.smoothing = smoothing
        self._clock = clock
        self.peak_to_peak = 0
        self.level_db = 0.0
        self._primed = False

    def capture(self) -> int:
        """Poll the channel for one window and return its peak-to-peak amplitude."""
        high = -1
        low = math.inf
        deadline = self._clock() + self.window_ms
        while self._clock() < deadline:
            value = self._read()
            high = max(high, value)
            low = min(low, value)
        self.peak_to_peak = int(high - low) if high >= 0 else 0
        return self.peak_to_peak

    def to_db(self, peak_to_peak: int) -> float:
        """Convert a peak-to-peak amplitude to dB relative to the reference."""
        return self.floor_db + 20 * math.log10(max(peak_to_peak, 1) / self.reference)

    def sample(self) -> float:
        """Capture one window and fold it into the smoothed level."""
        db = self.to_db(self.capture())
        if not self._primed:
            self.level_db = db
            self._primed = True
        else:
            self.level_db += self.smoothing * (db - self.level_db)
        return self.level_db
