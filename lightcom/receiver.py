"""
LightCom Receiver - Reassembles a message from detection events.

The signal input source pushes events from its own callback context into
a queue; the buffer, recoverer and scanner are only touched by
process_pending(), called from the consumer's context.
"""

import logging
import queue
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from .config import LinkConfig
from .recovery import DetectionEvent, RunLengthRecoverer, events_from_samples
from .scanner import FrameScanner, ScanStatus

# Module-level logger
_logger = logging.getLogger(__name__)


class SessionState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PAUSED = "paused"
    DECODED = "decoded"  # terminal


class ReceiveSession:
    """
    One listening session: Idle -> Listening <-> Paused -> Decoded.

    Invalid frames clear the buffer and listening continues. A decoded
    message ends the session; start a new session for the next message.
    """

    def __init__(
        self,
        config: Optional[LinkConfig] = None,
        callback: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize a receive session.

        Args:
            config: Link configuration (frequency and markers must match the sender)
            callback: Optional callback receiving the decoded message
        """
        self.config = config or LinkConfig()
        self.callback = callback

        self.state = SessionState.IDLE
        self._queue: queue.Queue[DetectionEvent] = queue.Queue()
        self.recoverer = RunLengthRecoverer(self.config.frequency_hz)
        self.scanner = FrameScanner(self.config.start_marker, self.config.end_marker)

        # Statistics
        self.events_received = 0
        self.events_dropped = 0
        self.frames_invalid = 0
        self.message: Optional[str] = None

    @property
    def listening(self) -> bool:
        return self.state is SessionState.LISTENING

    def start(self):
        """Start accepting detection events."""
        if self.state is SessionState.DECODED:
            raise RuntimeError("Session already decoded a message; start a new session")
        self.state = SessionState.LISTENING

    def pause(self):
        """Stop accepting events; buffered events are kept."""
        if self.state is SessionState.LISTENING:
            self.state = SessionState.PAUSED

    def resume(self):
        """Accept events again after pause()."""
        if self.state is SessionState.PAUSED:
            self.state = SessionState.LISTENING

    def reset(self):
        """
        Clear the event buffer and any queued events.

        A listening or paused session goes back to listening. A decoded
        session becomes a fresh idle session with zeroed statistics.
        """
        self._clear_queue()
        self.recoverer.reset()
        self.message = None

        if self.state is SessionState.PAUSED:
            self.state = SessionState.LISTENING
        elif self.state is SessionState.DECODED:
            self.state = SessionState.IDLE
            self.events_received = 0
            self.events_dropped = 0
            self.frames_invalid = 0

    def _clear_queue(self):
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                return

    def push(self, event: DetectionEvent):
        """
        Queue a detection event.

        Safe to call from the signal input source's callback thread.
        Events are dropped unless the session is listening. The dropped
        counter is updated from the caller's thread and is approximate
        while a sensor is running.
        """
        if self.state is not SessionState.LISTENING:
            self.events_dropped += 1
            return
        self._queue.put(event)

    def process_pending(self) -> Optional[str]:
        """
        Consume queued events, scanning after each one.

        Returns:
            The decoded message once a valid frame is complete, else None
        """
        while self.state is not SessionState.DECODED:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                return None

            self.events_received += 1
            self.recoverer.feed(event)
            result = self.scanner.scan(self.recoverer.bits)

            if result.status is ScanStatus.INVALID:
                self.frames_invalid += 1
                _logger.warning(f"Invalid frame discarded: {result.reason}")
                self.recoverer.reset()
            elif result.status is ScanStatus.DECODED:
                self._finish(result.text)
                return result.text

        return self.message

    def _finish(self, text: str):
        self.message = text
        self.state = SessionState.DECODED
        self.recoverer.reset()
        self._clear_queue()
        _logger.info(f"Decoded message: {text!r}")

        if self.callback:
            self.callback(text)

    def feed(self, events: Iterable[DetectionEvent]) -> Optional[str]:
        """
        Push and process a batch of events (offline decoding).

        Starts the session if it is idle.
        """
        if self.state is SessionState.IDLE:
            self.start()

        for event in events:
            self.push(event)
            text = self.process_pending()
            if text is not None:
                return text
        return None

    def get_statistics(self) -> dict:
        """
        Get session statistics.

        Returns:
            Dict with: state, events_received, events_dropped,
            frames_invalid, message
        """
        return {
            "state": self.state.value,
            "events_received": self.events_received,
            "events_dropped": self.events_dropped,
            "frames_invalid": self.frames_invalid,
            "message": self.message,
        }


def decode_file(
    file_path: str | Path,
    config: Optional[LinkConfig] = None,
    threshold: Optional[float] = None,
) -> Optional[str]:
    """
    Decode a message from a recorded level track.

    Args:
        file_path: Path to audio file holding the on/off levels
        config: Link configuration used by the sender
        threshold: Level above which the signal is present
            (default: half the peak level)

    Returns:
        Decoded message, or None if no valid frame was found
    """
    import soundfile as sf

    samples, sample_rate = sf.read(str(file_path))
    events = events_from_samples(samples, sample_rate, threshold)
    _logger.debug(f"Read {len(events)} samples at {sample_rate} Hz from {file_path}")

    session = ReceiveSession(config)
    return session.feed(events)
