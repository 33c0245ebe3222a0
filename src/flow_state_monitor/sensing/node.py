"""Cooperative single-threaded sensing node.

Independent periodic ticks share one loop:

    acquisition  (100 ms)  noise window + optical sample -> reading
    display      (500 ms)  presenter.show(reading)
    indicator    (100 ms)  presenter.indicate(state)
    diagnostic   (5 s)     structured status log
    upload       (8 s)     fire-and-forget telemetry write

Ticks never preempt each other. The noise window inside the acquisition
tick busy-waits for ``noise_window_ms``; every other tick waits for it.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import structlog

from flow_state_monitor.classifier import classify
from flow_state_monitor.core.config import Settings
from flow_state_monitor.core.exceptions import SensorUnavailableError
from flow_state_monitor.models.state import ClassifiedState
from flow_state_monitor.models.telemetry import FilteredReading, RawSample
from flow_state_monitor.sensing.beat_detector import BeatDetector
from flow_state_monitor.sensing.noise import NoiseSampler
from flow_state_monitor.sensing.source import SignalSource
from flow_state_monitor.services.error_handler import ErrorHandler
from flow_state_monitor.services.telemetry import TelemetryUploader

logger = structlog.get_logger()


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class Presenter(Protocol):
    """Display and indicator output owned by the hardware layer."""

    def show(self, reading: FilteredReading) -> None: ...

    def indicate(self, state: ClassifiedState) -> None: ...


@dataclass
class Tick:
    """A periodic task on the cooperative loop."""

    name: str
    period_ms: int
    callback: Callable[[float], None]
    last_run_ms: float | None = None

    def due(self, now_ms: float) -> bool:
        return self.last_run_ms is None or now_ms - self.last_run_ms >= self.period_ms


class NodeContext:
    """Current node readings, owned by the node and shared with readers.

    The reading is a frozen object swapped in one assignment, so a reader on
    another thread always sees a complete reading.
    """

    def __init__(self) -> None:
        self._reading = FilteredReading()
        self.sensor_available = True
        self.running = False
        self.started_at: float | None = None

    @property
    def reading(self) -> FilteredReading:
        return self._reading

    def publish(self, reading: FilteredReading) -> None:
        self._reading = reading


class SensingNode:
    """Drive acquisition, classification and upload on one cooperative loop.

    Args:
        source: Raw signal source
        settings: Application settings (tick periods, thresholds)
        context: Shared reading context (a fresh one by default)
        uploader: Telemetry uploader; upload tick is skipped when None
        presenter: Display/indicator output; those ticks are skipped when None
        clock: Monotonic clock in milliseconds
    """

    def __init__(
        self,
        source: SignalSource,
        settings: Settings,
        context: NodeContext | None = None,
        uploader: TelemetryUploader | None = None,
        presenter: Presenter | None = None,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.source = source
        self.settings = settings
        self.context = context or NodeContext()
        self.uploader = uploader
        self.presenter = presenter
        self._clock = clock
        self.detector = BeatDetector(finger_threshold=settings.finger_threshold)
        self.noise = NoiseSampler(
            read=source.read_noise,
            window_ms=settings.noise_window_ms,
            reference=settings.noise_reference,
            floor_db=settings.noise_floor_db,
            smoothing=settings.noise_smoothing,
            clock=clock,
        )
        self.optical_raw = 0
        self.last_sample: RawSample | None = None
        self.tick_failures = 0
        self.error_handler = ErrorHandler()
        self.ticks = self._build_ticks()
        self.logger = logger.bind(component="sensing_node")

    def _build_ticks(self) -> list[Tick]:
        s = self.settings
        ticks = [Tick("acquisition", s.acquisition_interval_ms, self.acquire)]
        if self.presenter is not None:
            ticks.append(Tick("display", s.display_interval_ms, self.display))
            ticks.append(Tick("indicator", s.indicator_interval_ms, self.indicate))
        ticks.append(Tick("diagnostic", s.diagnostic_interval_ms, self.diagnose))
        if self.uploader is not None:
            ticks.append(Tick("upload", s.upload_interval_ms, self.upload))
        return ticks

    def start(self) -> None:
        """Initialise the signal source; failure leaves the node in degraded mode."""
        try:
            self.source.open()
        except SensorUnavailableError as e:
            self._degrade(e, stage="open")
        self.context.started_at = self._clock()

    def _degrade(self, exc: SensorUnavailableError, stage: str) -> None:
        self.error_handler.classify(exc, context={"component": "sensing_node", "stage": stage})
        self.context.sensor_available = False
        self.logger.warning("Optical sensor unavailable, heart metrics disabled", stage=stage)

    def run_pending(self) -> None:
        """Run every tick that is due, in registration order.

        A failing tick is classified and logged; the remaining ticks still run.
        """
        for tick in self.ticks:
            now = self._clock()
            if tick.due(now):
                tick.last_run_ms = now
                try:
                    tick.callback(now)
                except Exception as e:
                    self.tick_failures += 1
                    self.error_handler.classify(
                        e, context={"component": "sensing_node", "tick": tick.name}
                    )

    def run(self, stop: threading.Event | None = None, duration_s: float | None = None) -> None:
        """Loop until ``stop`` is set or ``duration_s`` elapses."""
        stop = stop or threading.Event()
        self.context.running = True
        try:
            self.start()
            deadline = None if duration_s is None else self._clock() + duration_s * 1000
            self.logger.info(
                "Sensing node started",
                sensor_available=self.context.sensor_available,
            )

            while not stop.is_set():
                if deadline is not None and self._clock() >= deadline:
                    break
                self.run_pending()
                time.sleep(0.002)
        finally:
            self.context.running = False
            if self.uploader is not None:
                self.uploader.close()

        self.logger.info("Sensing node stopped", beats=self.detector.beat_count)

    def acquire(self, now_ms: float) -> None:
        """Acquisition tick: sample both channels and publish a new reading."""
        noise_db = self.noise.sample()

        if self.context.sensor_available:
            try:
                self.optical_raw = self.source.read_optical()
            except SensorUnavailableError as e:
                self._degrade(e, stage="read")
                self.optical_raw = 0
            else:
                self.detector.process(self.optical_raw, self._clock())

        self.last_sample = RawSample(
            timestamp_ms=now_ms,
            noise_raw=self.noise.peak_to_peak,
            optical_ir=self.optical_raw,
        )
        self.context.publish(self.build_reading(noise_db))

    def build_reading(self, noise_db: float) -> FilteredReading:
        """Assemble the current reading from the detector and noise state."""
        detector = self.detector
        if not self.context.sensor_available:
            return FilteredReading(
                noise_db=noise_db,
                raw_peak_to_peak=self.noise.peak_to_peak,
                state=classify(noise_db, 0, 0),
            )

        sdnn, rmssd = detector.hrv()
        bpm = detector.heart_rate_average or detector.heart_rate_instant
        return FilteredReading(
            noise_db=noise_db,
            heart_rate_instant=detector.heart_rate_instant,
            heart_rate_average=detector.heart_rate_average,
            rr_interval_ms=detector.last_rr_ms,
            hrv_sdnn=sdnn,
            hrv_rmssd=rmssd,
            finger_detected=detector.finger_detected,
            signal_quality=detector.signal_quality,
            raw_peak_to_peak=self.noise.peak_to_peak,
            optical_raw=self.optical_raw,
            ac_magnitude=detector.ac_magnitude,
            beat_count=detector.beat_count,
            state=classify(noise_db, bpm, detector.last_rr_ms),
        )

    def display(self, now_ms: float) -> None:
        if self.presenter is not None:
            self.presenter.show(self.context.reading)

    def indicate(self, now_ms: float) -> None:
        if self.presenter is not None:
            self.presenter.indicate(self.context.reading.state)

    def diagnose(self, now_ms: float) -> None:
        reading = self.context.reading
        self.logger.info(
            "Node status",
            state=reading.state.value,
            noise_db=round(reading.noise_db, 1),
            bpm=reading.heart_rate_average,
            rmssd=round(reading.hrv_rmssd, 1),
            signal=reading.signal_quality.value,
            detector=self.detector.state.value,
            stable_readings=self.detector.stable_readings,
            beats=reading.beat_count,
        )

    def upload(self, now_ms: float) -> None:
        if self.uploader is not None:
            self.uploader.upload(self.context.reading)
