"""Signal sources for the sensing node.

Hardware drivers live outside this package; anything implementing
:class:`SignalSource` can drive the node. :class:`SimulatedSource` produces a
synthetic PPG waveform and room noise for development.
"""

from __future__ import annotations

import math
import random
import time
from typing import Protocol


class SignalSource(Protocol):
    """Raw access to the noise and optical channels."""

    def open(self) -> None:
        """Initialise the hardware. Raises SensorUnavailableError on failure."""

    def read_noise(self) -> int:
        """Return one raw microphone ADC sample."""

    def read_optical(self) -> int:
        """Return one raw infrared optical intensity."""


class SimulatedSource:
    """Synthetic signal source.

    The optical channel is a sinusoidal pulse at ``heart_rate`` BPM riding on
    ``dc_level``; the noise channel swings around mid-scale with an amplitude
    of ``noise_amplitude`` counts.
    """

    def __init__(
        self,
        heart_rate: float = 68.0,
        dc_level: int = 80000,
        pulse_amplitude: int = 600,
        noise_amplitude: int = 20,
        finger_present: bool = True,
        seed: int | None = None,
    ) -> None:
        self.heart_rate = heart_rate
        self.dc_level = dc_level
        self.pulse_amplitude = pulse_amplitude
        self.noise_amplitude = noise_amplitude
        self.finger_present = finger_present
        self._rng = random.Random(seed)
        self._started = time.monotonic()

    def open(self) -> None:
        self._started = time.monotonic()

    def read_noise(self) -> int:
        return 2048 + self._rng.randint(-self.noise_amplitude, self.noise_amplitude)

    def read_optical(self) -> int:
        if not self.finger_present:
            return self._rng.randint(0, 2000)
        elapsed = time.monotonic() - self._started
        phase = 2 * math.pi * elapsed * self.heart_rate / 60
        return int(self.dc_level + self.pulse_amplitude * math.sin(phase))
