"""Four-quadrant state classification.

Shared by the sensing node (live status) and the forecast task (labelling
historical rows), so both sides agree on what counts as flow state.
"""

from flow_state_monitor.models.state import ClassifiedState

NOISE_THRESHOLD_DB = 55.0
BPM_OPTIMAL_LOW = 60
BPM_OPTIMAL_HIGH = 80
RR_RELAXED_MS = 700  # R-R interval above this counts as relaxed
BPM_MIN_VALID = 40
BPM_MAX_VALID = 200


def is_valid_bpm(bpm: float) -> bool:
    """Check a heart rate against the plausible physiological range."""
    return BPM_MIN_VALID <= bpm <= BPM_MAX_VALID


def classify(noise_db: float, bpm: float, rr_interval_ms: float) -> ClassifiedState:
    """Classify the environment and physiology into one of four states.

    Args:
        noise_db: Smoothed ambient noise level (dB)
        bpm: Heart rate (BPM)
        rr_interval_ms: Latest inter-beat interval (ms)

    Returns:
        ClassifiedState quadrant; Standby whenever the heart rate is invalid
    """
    if not is_valid_bpm(bpm):
        return ClassifiedState.STANDBY

    is_quiet = noise_db < NOISE_THRESHOLD_DB
    is_good_physio = rr_interval_ms > RR_RELAXED_MS or BPM_OPTIMAL_LOW <= bpm <= BPM_OPTIMAL_HIGH

    if is_quiet and is_good_physio:
        return ClassifiedState.FLOW_STATE
    if is_good_physio:
        return ClassifiedState.NORMAL_LEARNING
    if is_quiet:
        return ClassifiedState.STANDBY
    return ClassifiedState.DISTRACTED
