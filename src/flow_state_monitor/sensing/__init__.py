"""Sensing node: signal acquisition, beat detection and HRV."""

from flow_state_monitor.sensing.beat_detector import BeatDetector
from flow_state_monitor.sensing.hrv import compute_hrv, compute_rmssd, compute_sdnn
from flow_state_monitor.sensing.node import NodeContext, SensingNode
from flow_state_monitor.sensing.noise import NoiseSampler
from flow_state_monitor.sensing.ring_buffer import RingBuffer
from flow_state_monitor.sensing.source import SignalSource, SimulatedSource

__all__ = [
    "BeatDetector",
    "NodeContext",
    "NoiseSampler",
    "RingBuffer",
    "SensingNode",
    "SignalSource",
    "SimulatedSource",
    "compute_hrv",
    "compute_rmssd",
    "compute_sdnn",
]
