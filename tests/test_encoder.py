"""
Tests for the LightCom encoder, file decoding and command line tools.
"""

import numpy as np
import pytest
import soundfile as sf
from click.testing import CliRunner

from lightcom import Frame, LightComEncoder, LinkConfig, decode_file
from lightcom.cli import decode as decode_cli
from lightcom.cli import encode as encode_cli


class TestLightComEncoder:
    """Test level track rendering."""

    def test_encoder_init(self):
        encoder = LightComEncoder()
        assert encoder.sample_rate == 1000
        assert encoder.config.frequency_hz == 10
        assert encoder.samples_per_bit == 100

    def test_length(self):
        config = LinkConfig(frequency_hz=10, cycles=2)
        samples, sr = LightComEncoder(config, sample_rate=1000).generate("AB")

        assert sr == 1000
        # 2 idle bits + 43 frame bits x 2 cycles + 2 idle bits
        assert len(samples) == (2 + 43 * 2 + 2) * 100

    def test_levels(self):
        config = LinkConfig(frequency_hz=10, cycles=1)
        samples, _ = LightComEncoder(config, sample_rate=1000).generate("AB", amplitude=0.5)

        assert set(np.unique(samples)) == {0.0, 0.5}
        # Idle before and after
        assert np.all(samples[:200] == 0.0)
        assert np.all(samples[-200:] == 0.0)

    def test_bits_match_frame(self):
        config = LinkConfig(frequency_hz=10, cycles=1)
        samples, _ = LightComEncoder(config, sample_rate=1000).generate("Hi")

        bits = "".join(
            "1" if samples[200 + i * 100 + 50] > 0 else "0"
            for i in range(len(Frame("Hi")))
        )
        assert bits == Frame("Hi").encode()

    def test_amplitude(self):
        config = LinkConfig(cycles=1)
        loud, _ = LightComEncoder(config).generate("A", amplitude=1.0)
        quiet, _ = LightComEncoder(config).generate("A", amplitude=0.25)
        assert np.max(loud) == 1.0
        assert np.max(quiet) == 0.25

    def test_nothing_to_send(self):
        with pytest.raises(ValueError):
            LightComEncoder().generate("?!")


class TestDecodeFile:
    """Test decoding recorded level tracks."""

    def test_file_round_trip(self, tmp_path):
        path = tmp_path / "msg.wav"
        config = LinkConfig(frequency_hz=20, cycles=2)
        LightComEncoder(config, sample_rate=2000).generate_to_file(path, "Hello42")

        assert path.exists()
        assert decode_file(path, config) == "Hello42"

    def test_silent_file(self, tmp_path):
        path = tmp_path / "silence.wav"
        sf.write(str(path), np.zeros(4000), 1000, subtype='PCM_16')
        assert decode_file(path) is None

    def test_explicit_threshold(self, tmp_path):
        path = tmp_path / "quiet.wav"
        config = LinkConfig(frequency_hz=10, cycles=1)
        LightComEncoder(config).generate_to_file(path, "Low", amplitude=0.2)
        assert decode_file(path, config, threshold=0.1) == "Low"
        assert decode_file(path, config, threshold=0.5) is None


class TestCli:
    """Test the command line tools."""

    def test_encode_then_decode(self, tmp_path):
        path = str(tmp_path / "cli.wav")
        runner = CliRunner()

        result = runner.invoke(encode_cli, ["Hello", "-o", path, "-f", "20"])
        assert result.exit_code == 0, result.output
        assert "Generated" in result.output

        result = runner.invoke(decode_cli, ["-i", path, "-f", "20"])
        assert result.exit_code == 0, result.output
        assert "Message: Hello" in result.output

    def test_encode_nothing_to_send(self, tmp_path):
        result = CliRunner().invoke(encode_cli, ["!!!", "-o", str(tmp_path / "x.wav")])
        assert result.exit_code == 1

    def test_encode_invalid_frequency(self, tmp_path):
        result = CliRunner().invoke(encode_cli, ["AB", "-f", "0", "-o", str(tmp_path / "x.wav")])
        assert result.exit_code == 1

    def test_encode_live_needs_terminal(self):
        result = CliRunner().invoke(encode_cli, ["AB", "--live"])
        assert result.exit_code == 1

    def test_decode_wrong_frequency(self, tmp_path):
        path = str(tmp_path / "cli.wav")
        runner = CliRunner()
        runner.invoke(encode_cli, ["AB", "-o", path, "-f", "10", "-r", "1"])

        result = runner.invoke(decode_cli, ["-i", path, "-f", "25"])
        assert result.exit_code == 1
