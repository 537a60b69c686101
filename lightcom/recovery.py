"""
Run-length clock recovery.

There is no shared clock between sender and receiver. The only timing
reference is the nominal bit period, so each run of equal detection
states is converted to round(duration / bit_period) bits. This tolerates
up to +/-0.5 bit periods of jitter per run; error is not re-synchronized
inside long runs.
"""

from typing import Iterable, NamedTuple, Optional

import numpy as np

from . import DEFAULT_FREQUENCY


class DetectionEvent(NamedTuple):
    """One sensor sample: monotonic timestamp (ms) and signal present."""

    timestamp: float
    state: bool


class RunLengthRecoverer:
    """
    Incremental conversion of detection events to a bit string.

    A run's duration is measured between the state changes that bound it,
    since only change timestamps are reliable. The first run is measured
    from the first observed event (its true start is unknown). The final,
    still-open run is measured up to the latest event, so the recovered
    string only ever grows as events arrive.
    """

    def __init__(self, frequency_hz: float = DEFAULT_FREQUENCY):
        """
        Initialize recoverer.

        Args:
            frequency_hz: Nominal bit rate of the sender (bits per second)
        """
        if not frequency_hz > 0:
            raise ValueError("frequency_hz must be positive")
        self.frequency_hz = frequency_hz
        self.bit_period_ms = 1000.0 / frequency_hz
        self.reset()

    def reset(self):
        """Drop all recovered bits and the open run."""
        self._closed: list[str] = []
        self._run_state: Optional[bool] = None
        self._run_start = 0.0
        self._last_timestamp = 0.0
        self.events_seen = 0
        self.runs_closed = 0

    def _bit_count(self, duration_ms: float) -> int:
        return max(1, int(round(duration_ms / self.bit_period_ms)))

    def _emit(self, state: bool, duration_ms: float) -> str:
        return ("1" if state else "0") * self._bit_count(duration_ms)

    def feed(self, event: DetectionEvent):
        """Add one detection event."""
        timestamp, state = event
        state = bool(state)
        self.events_seen += 1

        if self._run_state is None:
            # True start unknown: a short first run only adds leading bits,
            # which the last-marker search skips
            self._run_state = state
            self._run_start = timestamp
        elif state != self._run_state:
            # Edge: the previous run lasted from its start to this one's
            self._closed.append(self._emit(self._run_state, timestamp - self._run_start))
            self.runs_closed += 1
            self._run_state = state
            self._run_start = timestamp

        self._last_timestamp = timestamp

    def extend(self, events: Iterable[DetectionEvent]):
        """Add several detection events in chronological order."""
        for event in events:
            self.feed(event)

    @property
    def bits(self) -> str:
        """Recovered bit string, including the open run."""
        if self._run_state is None:
            return ""
        tail = self._emit(self._run_state, self._last_timestamp - self._run_start)
        return "".join(self._closed) + tail

    def __repr__(self) -> str:
        return (
            f"RunLengthRecoverer(frequency={self.frequency_hz}Hz, "
            f"events={self.events_seen}, runs={self.runs_closed})"
        )


def recover(events: Iterable[DetectionEvent], frequency_hz: float = DEFAULT_FREQUENCY) -> str:
    """
    Recover the bit string from a full buffer of detection events.

    Args:
        events: Detection events in chronological order
        frequency_hz: Nominal bit rate of the sender

    Returns:
        String of '0'/'1'
    """
    recoverer = RunLengthRecoverer(frequency_hz)
    recoverer.extend(events)
    return recoverer.bits


def events_from_samples(
    samples: np.ndarray,
    sample_rate: int,
    threshold: Optional[float] = None,
    start_ms: float = 0.0,
) -> list[DetectionEvent]:
    """
    Threshold a sampled level track into detection events.

    Args:
        samples: Level samples (mono; first channel is used otherwise)
        sample_rate: Samples per second
        threshold: Level above which the signal counts as present
            (default: half the peak absolute level)
        start_ms: Timestamp of the first sample

    Returns:
        One DetectionEvent per sample
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim > 1:
        samples = samples[:, 0]
    if len(samples) == 0:
        return []

    levels = np.abs(samples)
    if threshold is None:
        # Half the peak; a silent track never rises above 0
        threshold = float(np.max(levels)) / 2
    states = levels > threshold

    timestamps = start_ms + np.arange(len(levels)) * (1000.0 / sample_rate)
    return [
        DetectionEvent(float(timestamp), bool(state))
        for timestamp, state in zip(timestamps, states)
    ]
