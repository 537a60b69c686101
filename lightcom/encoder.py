"""
LightCom Encoder - Renders a transmission to a sampled level track.

The track is produced by running the real Transmitter against a recording
device on a virtual clock, so files carry exactly the timing a live
transmission would have.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from . import DEFAULT_SAMPLE_RATE
from .config import LinkConfig
from .frame import Frame
from .transmitter import RecordingOutput, Transmitter, VirtualClock

# Module-level logger
_logger = logging.getLogger(__name__)

IDLE_BITS = 2  # off periods before and after the transmission


class LightComEncoder:
    """Renders messages as on/off level tracks."""

    def __init__(
        self,
        config: Optional[LinkConfig] = None,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
    ):
        """
        Initialize encoder.

        Args:
            config: Link configuration (frequency, cycles, markers)
            sample_rate: Output samples per second
        """
        self.config = config or LinkConfig()
        self.sample_rate = sample_rate

        # Samples per bit
        self.samples_per_bit = sample_rate / self.config.frequency_hz

    def _record(self, frame_bits: str) -> tuple[list[tuple[float, bool]], float]:
        """Run a transmission on a virtual clock; return its state changes and end time."""
        clock = VirtualClock()
        output = RecordingOutput(clock=clock.now)
        transmitter = Transmitter(output, config=self.config)
        transmitter.run(frame_bits, clock=clock.now, sleep=clock.sleep)
        return output.changes, clock.now()

    def generate(self, text: str, amplitude: float = 0.7) -> tuple[np.ndarray, int]:
        """
        Generate the level track for a message.

        Args:
            text: Message; characters outside [A-Za-z0-9] are dropped
            amplitude: Level of the "on" state (0.0 to 1.0)

        Returns:
            Tuple of (samples, sample_rate)
        """
        frame = Frame(text, self.config.start_marker, self.config.end_marker)
        if frame.is_empty:
            raise ValueError("Nothing to send after removing unsupported characters")

        changes, end_time = self._record(frame.encode())

        lead = int(round(IDLE_BITS * self.samples_per_bit))
        end = lead + int(round(end_time * self.sample_rate))
        total_samples = end + lead

        result = np.zeros(total_samples)
        for i, (time_s, on) in enumerate(changes):
            begin = lead + int(round(time_s * self.sample_rate))
            if i + 1 < len(changes):
                stop = lead + int(round(changes[i + 1][0] * self.sample_rate))
            else:
                stop = end
            result[begin:stop] = amplitude if on else 0.0

        _logger.debug(
            f"Rendered {frame!r} x{self.config.cycles} to {total_samples} samples "
            f"({self.samples_per_bit:.1f} samples per bit)"
        )
        return result, self.sample_rate

    def generate_to_file(
        self,
        output_path: str | Path,
        text: str,
        amplitude: float = 0.7,
    ):
        """
        Generate and save the level track to an audio file.

        Args:
            output_path: Output WAV file path
            text: Message to encode
            amplitude: Level of the "on" state (0.0 to 1.0)
        """
        samples, sample_rate = self.generate(text, amplitude)

        sf.write(
            str(output_path),
            samples,
            sample_rate,
            subtype='PCM_16'
        )
