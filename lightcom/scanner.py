"""
Frame detection and validation on a recovered bit string.
"""

import logging
from enum import Enum
from typing import NamedTuple, Optional

from . import START_MARKER, END_MARKER, PARITY_BITS, BITS_PER_CHAR
from .codec import MalformedPayload, decode
from .frame import parity_trailer

# Module-level logger
_logger = logging.getLogger(__name__)


class ScanStatus(Enum):
    PENDING = "pending"  # no complete frame yet, keep listening
    DECODED = "decoded"
    INVALID = "invalid"  # markers found, checks failed; recoverable


class ScanResult(NamedTuple):
    status: ScanStatus
    text: Optional[str] = None
    reason: Optional[str] = None

    @property
    def decoded(self) -> bool:
        return self.status is ScanStatus.DECODED


PENDING = ScanResult(ScanStatus.PENDING)


def scan(
    bits: str,
    start_marker: str = START_MARKER,
    end_marker: str = END_MARKER,
) -> ScanResult:
    """
    Search a recovered bit string for a complete frame.

    The last start marker is used: when the sender repeats the frame and
    listening began mid-stream, the most recent start is the one most
    likely followed by an uncut frame. Markers occurring by chance inside
    payload bits are not guarded against.

    Args:
        bits: Recovered bit string
        start_marker: Bit pattern opening a frame
        end_marker: Bit pattern closing a frame

    Returns:
        ScanResult with PENDING, INVALID (with reason) or DECODED (with text)
    """
    start = bits.rfind(start_marker)
    if start < 0:
        return PENDING

    body = bits[start + len(start_marker):]
    end = body.rfind(end_marker)
    if end < 0:
        return PENDING

    payload = body[:max(0, end - PARITY_BITS)]
    parity = body[max(0, end - PARITY_BITS):end]

    if len(payload) < BITS_PER_CHAR or len(payload) % BITS_PER_CHAR != 0:
        return _invalid(f"payload length {len(payload)} is not a whole number of characters")

    expected = parity_trailer(payload, len(payload) // BITS_PER_CHAR)
    if parity != expected:
        return _invalid(f"parity mismatch: got {parity}, expected {expected}")

    try:
        text = decode(payload)
    except MalformedPayload as e:
        return _invalid(str(e))

    _logger.debug(f"Frame decoded: {len(payload) // BITS_PER_CHAR} characters")
    return ScanResult(ScanStatus.DECODED, text=text)


def _invalid(reason: str) -> ScanResult:
    _logger.debug(f"Invalid frame: {reason}")
    return ScanResult(ScanStatus.INVALID, reason=reason)


class FrameScanner:
    """Scans recovered bit strings with a fixed pair of markers."""

    def __init__(self, start_marker: str = START_MARKER, end_marker: str = END_MARKER):
        self.start_marker = start_marker
        self.end_marker = end_marker

    def scan(self, bits: str) -> ScanResult:
        return scan(bits, self.start_marker, self.end_marker)
