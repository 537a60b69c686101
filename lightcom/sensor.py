"""
Sound-card signal input source.

A photodiode or light sensor wired to an audio input makes the sound card
a cheap sampler for the light level. Each audio block becomes one
detection event: signal present when the block's peak level is above the
threshold.
"""

import logging
import time
from typing import Optional

import numpy as np

from .receiver import ReceiveSession
from .recovery import DetectionEvent

# Module-level logger
_logger = logging.getLogger(__name__)


class SoundcardSensor:
    """
    Feeds detection events from an audio input into a receive session.
    """

    def __init__(
        self,
        session: ReceiveSession,
        device: Optional[int] = None,
        sample_rate: Optional[int] = None,
        threshold: float = 0.1,
        blocksize: int = 256,
        channel: int = 0,
    ):
        """
        Initialize sensor.

        Args:
            session: Receive session the events are pushed to
            device: Audio input device (None = default)
            sample_rate: Audio sample rate (None = device default)
            threshold: Peak level above which the light counts as on
            blocksize: Samples per audio block, i.e. per detection event
            channel: Input channel carrying the sensor signal
        """
        self.session = session
        self.device = device
        self.sample_rate = sample_rate
        self.threshold = threshold
        self.blocksize = blocksize
        self.channel = channel

        self.stream = None
        self.blocks_received = 0

    def _audio_callback(self, indata: np.ndarray, frames, time_info, status):
        """
        Called by sounddevice for each audio block.

        Runs on the audio thread: only pushes into the session queue.
        """
        if status:
            _logger.warning(f"Audio status: {status}")

        try:
            if indata.ndim > 1:
                samples = indata[:, min(self.channel, indata.shape[1] - 1)]
            else:
                samples = indata
            level = float(np.max(np.abs(samples))) if len(samples) else 0.0

            self.blocks_received += 1
            self.session.push(DetectionEvent(time.monotonic() * 1000.0, level > self.threshold))
        except Exception as e:
            _logger.error(f"Error in audio callback: {e}")

    def start(self):
        """Start sampling from the audio input."""
        if self.stream is not None:
            return  # Already running

        import sounddevice as sd

        if self.sample_rate is None:
            device_info = sd.query_devices(self.device, 'input')
            self.sample_rate = int(device_info['default_samplerate'])
            _logger.info(f"Using sample rate {self.sample_rate} Hz from device: {device_info['name']}")

        self.stream = sd.InputStream(
            device=self.device,
            channels=self.channel + 1,
            samplerate=self.sample_rate,
            blocksize=self.blocksize,
            callback=self._audio_callback,
        )
        self.stream.start()

    def stop(self):
        """Stop sampling."""
        if self.stream is not None:
            self.stream.stop()
            self.stream.close()
            self.stream = None
