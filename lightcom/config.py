"""
Link configuration shared by both ends of a transmission.
"""

from . import DEFAULT_FREQUENCY, DEFAULT_CYCLES, START_MARKER, END_MARKER

MIN_MARKER_BITS = 8


class LinkConfig:
    """
    Settings that sender and receiver must agree on.

    frequency_hz drives the bit period on both ends, cycles only matters
    to the sender.
    """

    def __init__(
        self,
        frequency_hz: float = DEFAULT_FREQUENCY,
        cycles: int = DEFAULT_CYCLES,
        start_marker: str = START_MARKER,
        end_marker: str = END_MARKER,
    ):
        """
        Initialize a link configuration.

        Args:
            frequency_hz: Signal toggling rate in bits per second
            cycles: Number of times the whole frame is sent
            start_marker: Bit pattern opening a frame
            end_marker: Bit pattern closing a frame
        """
        if not frequency_hz > 0:
            raise ValueError("frequency_hz must be positive")
        if cycles < 1:
            raise ValueError("cycles must be at least 1")

        for name, marker in (("start_marker", start_marker), ("end_marker", end_marker)):
            if len(marker) < MIN_MARKER_BITS:
                raise ValueError(f"{name} must be at least {MIN_MARKER_BITS} bits")
            if marker.strip("01"):
                raise ValueError(f"{name} must only contain '0' and '1'")

        if start_marker == end_marker:
            raise ValueError("start_marker and end_marker must differ")
        if start_marker.startswith(end_marker) or end_marker.startswith(start_marker):
            raise ValueError("one marker must not be a prefix of the other")

        self.frequency_hz = frequency_hz
        self.cycles = cycles
        self.start_marker = start_marker
        self.end_marker = end_marker

    @property
    def bit_period_ms(self) -> float:
        """Duration of one bit in milliseconds."""
        return 1000.0 / self.frequency_hz

    def __repr__(self) -> str:
        return (
            f"LinkConfig(frequency={self.frequency_hz}Hz, cycles={self.cycles}, "
            f"start={self.start_marker}, end={self.end_marker})"
        )
