"""
Text <-> bit string conversion.

Each accepted character is sent as its 8-bit ASCII code, MSB first.
"""

import re

from . import BITS_PER_CHAR

_ALLOWED = re.compile(r"[A-Za-z0-9]")


class MalformedPayload(ValueError):
    """Bit string cannot be split into whole characters."""


def filter_text(text: str) -> str:
    """Drop every character outside a-z, A-Z and 0-9."""
    return "".join(_ALLOWED.findall(text))


def encode(text: str) -> str:
    """
    Encode text to a bit string.

    Characters outside [A-Za-z0-9] are silently dropped. An empty result is
    a valid zero-length payload.

    Args:
        text: Message to encode

    Returns:
        String of '0'/'1', 8 bits per character (MSB first)
    """
    return "".join(format(ord(char), "08b") for char in filter_text(text))


def decode(bits: str) -> str:
    """
    Decode a bit string back to text.

    Args:
        bits: String of '0'/'1' whose length is a multiple of 8

    Returns:
        Decoded text (any byte value 0-255 maps to one character)

    Raises:
        MalformedPayload: If the length is not a multiple of 8 or the
            string contains anything but '0' and '1'
    """
    if len(bits) % BITS_PER_CHAR != 0:
        raise MalformedPayload(
            f"payload length {len(bits)} is not a multiple of {BITS_PER_CHAR}"
        )
    if bits.strip("01"):
        raise MalformedPayload("payload contains non-binary symbols")

    return "".join(
        chr(int(bits[i:i + BITS_PER_CHAR], 2))
        for i in range(0, len(bits), BITS_PER_CHAR)
    )
