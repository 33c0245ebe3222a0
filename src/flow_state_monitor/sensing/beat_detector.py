"""Adaptive heartbeat detection on a raw optical (PPG) stream.

The detector is a small state machine driven one sample at a time:

    NO_FINGER -> ACQUIRING -> TRACKING <-> PULSE

While a finger is on the sensor, a sliding window of the last WINDOW_SIZE
samples gives a baseline (window mean) and an amplitude estimate (half the
window's peak-to-peak). A beat starts when the signal rises through
``baseline + round(amplitude * 0.3)`` and ends when it falls back below it.
The time between successive beat ends is the inter-beat interval.

Intervals that imply a plausible rate feed two ring buffers: the rolling
average heart rate (4 entries) and the HRV interval history (15 entries).
Both buffers survive finger loss so HRV and the average recover quickly when
contact returns.
"""

from __future__ import annotations

from statistics import fmean

import structlog

from flow_state_monitor.core.numeric import round_half_up
from flow_state_monitor.models.state import DetectorState, SignalQuality
from flow_state_monitor.sensing.hrv import compute_hrv
from flow_state_monitor.sensing.ring_buffer import RingBuffer

logger = structlog.get_logger()

WINDOW_SIZE = 30
RATE_BUFFER_SIZE = 4
RR_BUFFER_SIZE = 15

THRESHOLD_FACTOR = 0.3
MIN_AMPLITUDE = 30  # Below this no rising edge is attempted

# Interval gate (ms) and admission gate (BPM)
MIN_BEAT_INTERVAL_MS = 400
MAX_BEAT_INTERVAL_MS = 3000
MIN_ADMITTED_BPM = 45
MAX_ADMITTED_BPM = 150

# Amplitude bands for signal quality
FAIR_AMPLITUDE = 100
GOOD_AMPLITUDE = 500


def signal_quality_for(amplitude: float, finger_detected: bool = True) -> SignalQuality:
    """Band an amplitude estimate into a signal-quality label."""
    if not finger_detected:
        return SignalQuality.NONE
    if amplitude < MIN_AMPLITUDE:
        return SignalQuality.WEAK
    if amplitude < FAIR_AMPLITUDE:
        return SignalQuality.FAIR
    if amplitude < GOOD_AMPLITUDE:
        return SignalQuality.GOOD
    return SignalQuality.EXCELLENT


class BeatDetector:
    """Convert raw optical samples into beats, heart rate and intervals.

    Attributes:
        finger_threshold: Optical intensity above which a finger is present
        state: Current state machine state
        heart_rate_instant: Rate implied by the last admitted beat (BPM)
        heart_rate_average: Rolling mean of the last admitted beats (BPM)
        last_rr_ms: Last admitted inter-beat interval (ms)
        beat_count: Cumulative number of admitted beats
        stable_readings: Consecutive samples with an adequate amplitude
    """

    def __init__(self, finger_threshold: int) -> None:
        self.finger_threshold = finger_threshold
        self.state = DetectorState.NO_FINGER

        self._window: RingBuffer[int] = RingBuffer(WINDOW_SIZE)
        self._rates: RingBuffer[float] = RingBuffer(RATE_BUFFER_SIZE)
        self._intervals: RingBuffer[int] = RingBuffer(RR_BUFFER_SIZE)

        self.baseline = 0.0
        self.amplitude = 0.0
        self.threshold = 0.0
        self.ac_magnitude = 0

        self.heart_rate_instant = 0
        self.heart_rate_average = 0
        self.last_rr_ms = 0
        self.beat_count = 0
        self.stable_readings = 0

        self._previous: int | None = None
        self._last_beat_ms: float | None = None
        self._pulse_start_ms: float | None = None
        self._pulse_peak = 0

        self.logger = logger.bind(component="beat_detector")

    @property
    def finger_detected(self) -> bool:
        return self.state is not DetectorState.NO_FINGER

    @property
    def in_pulse(self) -> bool:
        return self.state is DetectorState.PULSE

    @property
    def rr_intervals(self) -> list[int]:
        """Accepted inter-beat intervals, oldest first."""
        return self._intervals.values()

    @property
    def signal_quality(self) -> SignalQuality:
        return signal_quality_for(self.amplitude, self.finger_detected)

    def hrv(self) -> tuple[float, float]:
        """Return ``(sdnn, rmssd)`` from the interval history."""
        return compute_hrv(self.rr_intervals)

    def process(self, value: int, now_ms: float) -> bool:
        """Feed one optical sample.

        Args:
            value: Raw optical intensity
            now_ms: Monotonic sample time in milliseconds

        Returns:
            True when this sample completed an admitted beat
        """
        if value <= self.finger_threshold:
            if self.state is not DetectorState.NO_FINGER:
                self.logger.debug("Finger removed", value=value)
                self._reset_contact()
            return False

        if self.state is DetectorState.NO_FINGER:
            self.logger.debug("Finger detected", value=value)
            self.state = DetectorState.ACQUIRING

        self._window.push(value)
        if not self._window.full:
            self._previous = value
            return False

        if self.state is DetectorState.ACQUIRING:
            self.state = DetectorState.TRACKING

        window = self._window.values()
        high, low = max(window), min(window)
        self.baseline = fmean(window)
        self.amplitude = (high - low) / 2
        self.ac_magnitude = high - low
        self.threshold = self.baseline + round_half_up(self.amplitude * THRESHOLD_FACTOR)

        admitted = False
        if self.amplitude < MIN_AMPLITUDE:
            self.stable_readings = 0
        else:
            self.stable_readings += 1

        if self.state is DetectorState.TRACKING:
            rising = (
                value > self.threshold
                and self._previous is not None
                and self._previous <= self.threshold
            )
            if rising and self.amplitude >= MIN_AMPLITUDE:
                self.state = DetectorState.PULSE
                self._pulse_start_ms = now_ms
                self._pulse_peak = value
        elif self.state is DetectorState.PULSE:
            self._pulse_peak = max(self._pulse_peak, value)
            if value < self.threshold:
                self.state = DetectorState.TRACKING
                admitted = self._complete_beat(now_ms)

        self._previous = value
        return admitted

    def _complete_beat(self, now_ms: float) -> bool:
        admitted = False
        if self._last_beat_ms is not None:
            delta = now_ms - self._last_beat_ms
            if MIN_BEAT_INTERVAL_MS <= delta <= MAX_BEAT_INTERVAL_MS:
                instant = 60000 / delta
                if MIN_ADMITTED_BPM <= instant <= MAX_ADMITTED_BPM:
                    self._rates.push(instant)
                    self._intervals.push(round_half_up(delta))
                    self.heart_rate_instant = round_half_up(instant)
                    self.heart_rate_average = round_half_up(fmean(self._rates.values()))
                    self.last_rr_ms = round_half_up(delta)
                    self.beat_count += 1
                    admitted = True
                else:
                    self.logger.debug("Beat rejected", instant_bpm=round(instant, 1))
        self._last_beat_ms = now_ms
        return admitted

    def _reset_contact(self) -> None:
        """Drop the current contact state; the rate and interval buffers are kept."""
        self.state = DetectorState.NO_FINGER
        self._window.clear()
        self.baseline = 0.0
        self.amplitude = 0.0
        self.threshold = 0.0
        self.ac_magnitude = 0
        self.stable_readings = 0
        self.heart_rate_instant = 0
        self.heart_rate_average = 0
        self._previous = None
        self._pulse_start_ms = None
        self._pulse_peak = 0
