"""
LightCom command line tools.

lightcom-encode: render a message to an audio file, or flash it in the terminal
lightcom-decode: decode a message from a recorded file or a live audio input
"""

import logging
import shutil
import sys
import time

import click

from . import DEFAULT_FREQUENCY, DEFAULT_CYCLES, DEFAULT_SAMPLE_RATE
from .config import LinkConfig
from .encoder import LightComEncoder
from .receiver import ReceiveSession, decode_file
from .transmitter import DeviceUnavailable, SignalOutput, Transmitter


def _setup_logging(verbose: bool):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )


class ConsoleOutput(SignalOutput):
    """Uses a full-width terminal line as the light: white for on, black for off."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.width = shutil.get_terminal_size().columns

    @property
    def available(self) -> bool:
        return self.stream.isatty()

    def set_state(self, on: bool):
        block = click.style(" " * self.width, bg="white" if on else "black")
        click.echo(f"\r{block}", nl=False, file=self.stream)


def _make_config(frequency: float, cycles: int) -> LinkConfig:
    try:
        return LinkConfig(frequency_hz=frequency, cycles=cycles)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command()
@click.argument("text", type=str)
@click.option(
    "-o", "--output",
    type=click.Path(),
    default="lightcom.wav",
    help="Output WAV file path",
)
@click.option(
    "-f", "--frequency",
    type=float,
    default=DEFAULT_FREQUENCY,
    help=f"Bit rate in Hz (default: {DEFAULT_FREQUENCY})",
)
@click.option(
    "-r", "--repeat",
    type=int,
    default=DEFAULT_CYCLES,
    help=f"Number of times the frame is sent (default: {DEFAULT_CYCLES})",
)
@click.option(
    "-s", "--sample-rate",
    type=int,
    default=DEFAULT_SAMPLE_RATE,
    help=f"Sample rate in Hz (default: {DEFAULT_SAMPLE_RATE})",
)
@click.option(
    "-a", "--amplitude",
    type=float,
    default=0.7,
    help="Amplitude 0.0-1.0 (default: 0.7)",
)
@click.option(
    "--live",
    is_flag=True,
    help="Flash the message in this terminal instead of writing a file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
def encode(text: str, output: str, frequency: float, repeat: int, sample_rate: int,
           amplitude: float, live: bool, verbose: bool):
    """
    Send TEXT as an on/off light signal.

    Only the characters a-z, A-Z and 0-9 are sent; others are dropped.

    Examples:

        lightcom-encode HELLO -o hello.wav

        lightcom-encode Hello42 -f 5 -r 3 --live
    """
    _setup_logging(verbose)
    config = _make_config(frequency, repeat)

    if live:
        transmitter = Transmitter(ConsoleOutput(), config=config)
        try:
            sent = transmitter.send(text)
        except DeviceUnavailable as e:
            click.echo(f"Error: {e} (is this a terminal?)", err=True)
            sys.exit(1)
        except KeyboardInterrupt:
            click.echo("\n\nStopped.")
            return

        if not sent:
            click.echo("Nothing to send.", err=True)
            sys.exit(1)
        click.echo("")
        return

    if verbose:
        click.echo(f"Rendering {text!r} at {frequency} Hz, {repeat} cycles...")
        click.echo(f"  Output: {output}")
        click.echo(f"  Sample rate: {sample_rate} Hz")
        click.echo(f"  Amplitude: {amplitude}")

    encoder = LightComEncoder(config, sample_rate=sample_rate)

    try:
        encoder.generate_to_file(output, text, amplitude)
        click.echo(f"✓ Generated {output}")
    except Exception as e:
        click.echo(f"Error generating file: {e}", err=True)
        sys.exit(1)


@click.command()
@click.option(
    "-i", "--input",
    type=click.Path(exists=True),
    help="Decode from file instead of live audio",
)
@click.option(
    "-f", "--frequency",
    type=float,
    default=DEFAULT_FREQUENCY,
    help=f"Bit rate in Hz (default: {DEFAULT_FREQUENCY})",
)
@click.option(
    "-t", "--threshold",
    type=float,
    default=None,
    help="Signal level counted as on (default: half peak for files, 0.1 live)",
)
@click.option(
    "-d", "--device",
    type=int,
    help="Audio input device number (default: system default)",
)
@click.option(
    "-l", "--list-devices",
    is_flag=True,
    help="List available audio input devices",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Give up after this many seconds of live listening",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output with statistics",
)
def decode(input: str | None, frequency: float, threshold: float | None, device: int | None,
           list_devices: bool, timeout: float | None, verbose: bool):
    """
    Decode a LightCom message.

    Examples:

        lightcom-decode -i hello.wav      # Decode from file

        lightcom-decode -d 2              # Listen on audio device 2

        lightcom-decode --list-devices    # Show audio devices
    """
    _setup_logging(verbose)

    if list_devices:
        import sounddevice as sd
        click.echo("Audio Input Devices:")
        click.echo("-" * 60)
        for i, dev in enumerate(sd.query_devices()):
            if dev['max_input_channels'] > 0:
                click.echo(f"  [{i}] {dev['name']}")
        return

    config = _make_config(frequency, DEFAULT_CYCLES)

    # File decoding mode
    if input:
        click.echo(f"Decoding from file: {input}")
        click.echo("-" * 40)

        message = decode_file(input, config, threshold)
        if message is None:
            click.echo("No valid LightCom frame detected.", err=True)
            sys.exit(1)

        click.echo(f"Message: {message}")
        return

    # Live decoding mode
    from .sensor import SoundcardSensor

    session = ReceiveSession(config)
    sensor = SoundcardSensor(
        session,
        device=device,
        threshold=threshold if threshold is not None else 0.1,
    )

    click.echo("Listening for LightCom signal on live audio input...")
    if device is not None:
        click.echo(f"Using device {device}")
    click.echo("Press Ctrl+C to stop.")
    click.echo("-" * 40)

    started = time.monotonic()
    try:
        session.start()
        sensor.start()

        while True:
            time.sleep(0.1)

            message = session.process_pending()
            if message is not None:
                click.echo(f"\rMessage: {message}")
                break

            if timeout is not None and time.monotonic() - started > timeout:
                click.echo("\nTimed out waiting for a frame.", err=True)
                sys.exit(1)

            stats = session.get_statistics()
            if verbose:
                click.echo(f"\r{stats}", nl=False)
            else:
                click.echo(
                    f"\rwaiting for signal... (events: {stats['events_received']}, "
                    f"invalid frames: {stats['frames_invalid']})",
                    nl=False,
                )

    except KeyboardInterrupt:
        click.echo("\n\nStopped.")
    except Exception as e:
        click.echo(f"\nError: {e}", err=True)
        sys.exit(1)
    finally:
        sensor.stop()
