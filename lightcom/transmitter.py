"""
LightCom Transmitter - Drives a signal output device through a frame.

Each bit is one scheduler tick. The tick function only flips the device
and advances its position; waiting between ticks belongs to the scheduler
(run() below, or any external timer).
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from . import DEFAULT_FREQUENCY, DEFAULT_CYCLES
from .config import LinkConfig
from .frame import Frame

# Module-level logger
_logger = logging.getLogger(__name__)


class DeviceUnavailable(RuntimeError):
    """The signal output device is missing or cannot change state."""


class SignalOutput(ABC):
    """
    A device that can be switched on (1) or off (0).

    set_state() must take effect before the next scheduled tick and raise
    DeviceUnavailable when the device cannot be driven.
    """

    @property
    def available(self) -> bool:
        return True

    @abstractmethod
    def set_state(self, on: bool):
        """Switch the output on or off."""


class RecordingOutput(SignalOutput):
    """
    Output device that records state changes instead of emitting them.

    Used for offline rendering and simulation. Only actual changes are
    recorded, as (time_seconds, on) tuples.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.state: Optional[bool] = None
        self.changes: list[tuple[float, bool]] = []
        self.writes = 0

    def set_state(self, on: bool):
        self.writes += 1
        if on != self.state:
            self.changes.append((self.clock(), on))
        self.state = on


class VirtualClock:
    """Clock whose sleep() advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.time = start

    def now(self) -> float:
        return self.time

    def sleep(self, seconds: float):
        if seconds > 0:
            self.time += seconds


class TransmitSession:
    """Owned state of one transmission: frame bits, position and cycle."""

    def __init__(self, frame_bits: str, cycles: int):
        self.frame_bits = frame_bits
        self.cycles = cycles
        self.index = 0
        self.cycles_completed = 0
        self.done = False

    def __repr__(self) -> str:
        return (
            f"TransmitSession(bit={self.index}/{len(self.frame_bits)}, "
            f"cycle={self.cycles_completed + 1}/{self.cycles}, done={self.done})"
        )


class Transmitter:
    """
    Sends frames as on/off states at a fixed bit rate.

    Only one session runs at a time; once started it runs to completion.
    """

    def __init__(
        self,
        device: Optional[SignalOutput],
        frequency_hz: float = DEFAULT_FREQUENCY,
        cycles: int = DEFAULT_CYCLES,
        config: Optional[LinkConfig] = None,
    ):
        """
        Initialize transmitter.

        Args:
            device: Signal output device to drive
            frequency_hz: Bit rate (bits per second)
            cycles: Number of times each frame is sent
            config: Link configuration (overrides frequency_hz and cycles)
        """
        self.config = config or LinkConfig(frequency_hz=frequency_hz, cycles=cycles)
        self.device = device
        self.session: Optional[TransmitSession] = None

    @property
    def bit_period_ms(self) -> float:
        return self.config.bit_period_ms

    @property
    def busy(self) -> bool:
        return self.session is not None and not self.session.done

    def start(self, frame_bits: str) -> TransmitSession:
        """
        Begin a transmission session.

        Raises:
            DeviceUnavailable: If there is no usable output device; nothing
                is emitted in that case
        """
        if self.device is None or not self.device.available:
            raise DeviceUnavailable("Signal output device not available")
        if self.busy:
            raise RuntimeError("A transmission is already in progress")
        if not frame_bits:
            raise ValueError("frame_bits must not be empty")

        self.session = TransmitSession(frame_bits, self.config.cycles)
        return self.session

    def step(self) -> bool:
        """
        Advance one tick.

        Returns:
            True if another tick must be scheduled one bit period later,
            False once the device has been returned to idle (off)

        Raises:
            DeviceUnavailable: If the device fails; the session ends
        """
        session = self.session
        if session is None or session.done:
            return False

        try:
            if session.index >= len(session.frame_bits):
                session.cycles_completed += 1
                if session.cycles_completed >= session.cycles:
                    # Hold time of the last bit is over, go idle
                    self.device.set_state(False)
                    session.done = True
                    return False

                _logger.info(f"Repeat: {session.cycles_completed}")
                session.index = 0

            self.device.set_state(session.frame_bits[session.index] == "1")
        except DeviceUnavailable:
            # A failed session is over; the next start() may retry
            session.done = True
            _logger.error(f"Output device lost during {session!r}")
            raise

        session.index += 1
        return True

    def run(
        self,
        frame_bits: str,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Transmit a frame, blocking until all cycles are done.

        Ticks are scheduled against absolute deadlines so sleep overshoot
        does not accumulate over the frame.

        Args:
            frame_bits: Frame to send
            clock: Monotonic time source in seconds
            sleep: Sleep function in seconds
        """
        self.start(frame_bits)
        period = self.bit_period_ms / 1000.0
        started = clock()
        ticks = 0

        while self.step():
            ticks += 1
            sleep(max(0.0, started + ticks * period - clock()))

        _logger.debug(f"Transmission finished after {ticks} ticks")

    def send(
        self,
        text: str,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> bool:
        """
        Send a text message.

        Args:
            text: Message; characters outside [A-Za-z0-9] are dropped

        Returns:
            False if nothing was left to send, True once sent
        """
        frame = Frame(text, self.config.start_marker, self.config.end_marker)
        if frame.is_empty:
            _logger.warning("No data were given to send.")
            return False

        frame_bits = frame.encode()
        _logger.info(
            f"Submit characters: {frame.char_count} -- "
            f"{len(frame_bits)} bit"
        )
        self.run(frame_bits, clock=clock, sleep=sleep)
        return True
