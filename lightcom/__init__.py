"""
LightCom - Optical On/Off Data Link
Sends short text messages as a flashing light signal and recovers them
from timestamped detection events.
"""

__version__ = "0.1.0"

# Protocol constants
DEFAULT_FREQUENCY = 10  # Hz - bits per second
DEFAULT_CYCLES = 2  # frame repetitions per message
DEFAULT_SAMPLE_RATE = 1000  # Hz - rendered level track

# Frame structure
# Nine 1s in a row never occur inside [A-Za-z0-9] payload bytes
START_MARKER = "011111111101"
END_MARKER = "0010000000010"
PARITY_BITS = 2
BITS_PER_CHAR = 8

from .codec import MalformedPayload, filter_text, encode, decode
from .config import LinkConfig
from .frame import Frame, build_frame, parity_trailer
from .transmitter import (
    DeviceUnavailable,
    SignalOutput,
    RecordingOutput,
    VirtualClock,
    Transmitter,
)
from .recovery import DetectionEvent, RunLengthRecoverer, recover, events_from_samples
from .scanner import ScanStatus, ScanResult, FrameScanner, scan
from .receiver import SessionState, ReceiveSession, decode_file
from .encoder import LightComEncoder

__all__ = [
    "MalformedPayload",
    "filter_text",
    "encode",
    "decode",
    "LinkConfig",
    "Frame",
    "build_frame",
    "parity_trailer",
    "DeviceUnavailable",
    "SignalOutput",
    "RecordingOutput",
    "VirtualClock",
    "Transmitter",
    "DetectionEvent",
    "RunLengthRecoverer",
    "recover",
    "events_from_samples",
    "ScanStatus",
    "ScanResult",
    "FrameScanner",
    "scan",
    "SessionState",
    "ReceiveSession",
    "decode_file",
    "LightComEncoder",
]
