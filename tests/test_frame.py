"""
Tests for LightCom frames and link configuration.
"""

import pytest

from lightcom import END_MARKER, START_MARKER
from lightcom import Frame, LinkConfig, build_frame, encode, parity_trailer

AB_PAYLOAD = "0100000101000010"
AB_FRAME = START_MARKER + AB_PAYLOAD + "00" + END_MARKER


class TestParity:
    """Test the 2-bit parity trailer."""

    def test_even_bits_even_count(self):
        # 4 ones, 2 characters
        assert parity_trailer(AB_PAYLOAD, 2) == "00"

    def test_odd_count(self):
        # "A" has 2 ones, 1 character
        assert parity_trailer(encode("A"), 1) == "01"

    def test_odd_bits(self):
        # "C" = 01000011 has 3 ones
        assert parity_trailer(encode("C"), 1) == "11"

    def test_count_uses_characters_not_bits(self):
        # 16 bits is even either way; 3 characters is odd
        assert parity_trailer(encode("AAA"), 3)[1] == "1"


class TestBuildFrame:
    """Test frame assembly."""

    def test_known_vector(self):
        assert build_frame(AB_PAYLOAD, START_MARKER, END_MARKER) == AB_FRAME

    def test_default_markers(self):
        assert build_frame(AB_PAYLOAD) == AB_FRAME

    def test_layout(self):
        frame = build_frame(encode("Hello"))
        assert frame.startswith(START_MARKER)
        assert frame.endswith(END_MARKER)
        assert len(frame) == len(START_MARKER) + 40 + 2 + len(END_MARKER)

    def test_deterministic(self):
        assert build_frame(encode("xyz")) == build_frame(encode("xyz"))

    def test_explicit_char_count(self):
        frame = build_frame(encode("A"), char_count=2)
        assert frame[len(START_MARKER) + 8:len(START_MARKER) + 10] == "00"

    def test_partial_character_rejected(self):
        with pytest.raises(ValueError):
            build_frame("0100000")


class TestFrame:
    """Test the Frame class."""

    def test_encode(self):
        assert Frame("AB").encode() == AB_FRAME

    def test_filters_text(self):
        frame = Frame("A-B!")
        assert frame.char_count == 2
        assert frame.encode() == AB_FRAME

    def test_length(self):
        assert len(Frame("AB")) == len(AB_FRAME) == 43

    def test_empty(self):
        assert Frame("?!").is_empty is True
        assert Frame("A").is_empty is False

    def test_custom_markers(self):
        frame = Frame("A", start_marker="11110000", end_marker="00001111")
        assert frame.encode() == "11110000" + encode("A") + "01" + "00001111"


class TestLinkConfig:
    """Test link configuration validation."""

    def test_defaults(self):
        config = LinkConfig()
        assert config.frequency_hz == 10
        assert config.cycles == 2
        assert config.start_marker == START_MARKER
        assert config.end_marker == END_MARKER

    def test_bit_period(self):
        assert LinkConfig(frequency_hz=10).bit_period_ms == 100.0
        assert LinkConfig(frequency_hz=3).bit_period_ms == pytest.approx(333.333, abs=1e-3)

    def test_invalid_frequency(self):
        with pytest.raises(ValueError):
            LinkConfig(frequency_hz=0)
        with pytest.raises(ValueError):
            LinkConfig(frequency_hz=-3)

    def test_invalid_cycles(self):
        with pytest.raises(ValueError):
            LinkConfig(cycles=0)

    def test_short_marker(self):
        with pytest.raises(ValueError):
            LinkConfig(start_marker="0111101")

    def test_non_binary_marker(self):
        with pytest.raises(ValueError):
            LinkConfig(end_marker="00100000002")

    def test_equal_markers(self):
        with pytest.raises(ValueError):
            LinkConfig(start_marker=END_MARKER, end_marker=END_MARKER)

    def test_prefix_markers(self):
        with pytest.raises(ValueError):
            LinkConfig(start_marker="01111111", end_marker="011111110")
