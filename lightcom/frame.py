"""
LightCom frame structure.
"""

from typing import Optional

from . import START_MARKER, END_MARKER, BITS_PER_CHAR
from .codec import encode


def parity_trailer(payload_bits: str, char_count: int) -> str:
    """
    Compute the 2-bit parity trailer.

    Bit 1 is the parity of the payload's 1-bits, bit 2 the parity of the
    character count (counted before bit expansion, not in bits).
    """
    bit_parity = payload_bits.count("1") % 2
    count_parity = char_count % 2
    return f"{bit_parity}{count_parity}"


def build_frame(
    payload_bits: str,
    start_marker: str = START_MARKER,
    end_marker: str = END_MARKER,
    char_count: Optional[int] = None,
) -> str:
    """
    Assemble a transmittable frame.

    Args:
        payload_bits: Encoded payload, 8 bits per character
        start_marker: Bit pattern opening the frame
        end_marker: Bit pattern closing the frame
        char_count: Character count before bit expansion
            (default: len(payload_bits) // 8)

    Returns:
        start_marker + payload + parity (2 bits) + end_marker
    """
    if len(payload_bits) % BITS_PER_CHAR != 0:
        raise ValueError("payload_bits length must be a multiple of 8")
    if char_count is None:
        char_count = len(payload_bits) // BITS_PER_CHAR

    return start_marker + payload_bits + parity_trailer(payload_bits, char_count) + end_marker


class Frame:
    """
    A single LightCom frame.

    Frame structure (MSB first per character):
    - Start marker: 12 bits (011111111101) by default
    - Payload: 8 bits per character, [A-Za-z0-9] only
    - Parity: 2 bits - payload bit parity, character count parity
    - End marker: 13 bits (0010000000010) by default
    """

    def __init__(
        self,
        text: str,
        start_marker: str = START_MARKER,
        end_marker: str = END_MARKER,
    ):
        """
        Initialize a frame.

        Args:
            text: Message to carry; unsupported characters are dropped
            start_marker: Bit pattern opening the frame
            end_marker: Bit pattern closing the frame
        """
        self.payload_bits = encode(text)
        self.char_count = len(self.payload_bits) // BITS_PER_CHAR
        self.start_marker = start_marker
        self.end_marker = end_marker

    @property
    def parity(self) -> str:
        return parity_trailer(self.payload_bits, self.char_count)

    @property
    def is_empty(self) -> bool:
        """True when nothing is left to send after filtering."""
        return self.char_count == 0

    def encode(self) -> str:
        """Encode the frame to its bit string."""
        return build_frame(
            self.payload_bits,
            self.start_marker,
            self.end_marker,
            char_count=self.char_count,
        )

    def __len__(self) -> int:
        return (
            len(self.start_marker)
            + len(self.payload_bits)
            + len(self.parity)
            + len(self.end_marker)
        )

    def __repr__(self) -> str:
        return (
            f"Frame(chars={self.char_count}, bits={len(self)}, "
            f"parity={self.parity})"
        )
