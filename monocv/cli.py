"""
CLI entrypoint for monocv.

`/main.py` delegates to `monocv.cli.main()` to keep service scripts stable.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import List, Optional

from monocv.control_loop import ControlLoop
from monocv.engine import MonoEngine
from monocv.midi_monitor import MidiMonitor, initialize_transport
from monocv.voice import Outputs
import monocv.config as config


def _configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(config.LOG_FILE),
            logging.StreamHandler(sys.stdout),
        ],
    )


def _print_outputs(outputs: Outputs):
    state = "ON " if outputs.gate else "off"
    print(f"gate {state} {outputs.gate:4.1f} | pitch {outputs.pitch:+.4f}", flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Monophonic MIDI to pitch/gate converter")
    parser.add_argument("--list-ports", action="store_true", help="List MIDI inputs and exit")
    parser.add_argument(
        "--port",
        type=str,
        default=None,
        help="MIDI input index or name. If not provided, the first device matching --device-keyword is used.",
    )
    parser.add_argument(
        "--device-keyword",
        type=str,
        default=config.MIDI_DEVICE_KEYWORD,
        help="Substring of the MIDI input name to connect to",
    )
    parser.add_argument("--backend", type=str, default=None, help="mido backend, e.g. mido.backends.rtmidi")
    parser.add_argument("--channel", type=int, default=config.MIDI_CHANNEL, help="MIDI channel to honor (0-15)")
    parser.add_argument(
        "--reference-note", type=int, default=config.REFERENCE_NOTE, help="Note giving a pitch output of 0"
    )
    parser.add_argument(
        "--bend-range", type=float, default=config.BEND_RANGE_SEMITONES, help="Pitch wheel range in semitones"
    )
    parser.add_argument("--gate-level", type=float, default=config.GATE_LEVEL, help="Gate output level")
    parser.add_argument("--tick-rate", type=float, default=config.TICK_RATE, help="Control ticks per second")
    parser.add_argument("--no-hotplug", action="store_true", help="Disable USB hotplug monitoring")
    parser.add_argument("--verbose", action="store_true", help="Log every decoded MIDI message")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not initialize_transport(args.backend):
        print("Could not initialize MIDI. Is python-rtmidi installed?")
        return 1

    try:
        engine = MonoEngine(
            channel=args.channel,
            reference_note=args.reference_note,
            bend_range_semitones=args.bend_range,
            gate_level=args.gate_level,
        )
    except ValueError as e:
        parser.error(str(e))

    monitor = MidiMonitor(device_keyword=args.device_keyword, enable_hotplug=not args.no_hotplug)

    if args.list_ports:
        ports = monitor.list_ports()
        print(f"\nAvailable MIDI inputs: {len(ports)}")
        print("=" * 60)
        for index, name in enumerate(ports):
            print(f"  [{index}] {name}")
        if not ports:
            print("  No MIDI devices")
        return 0

    if args.port is not None:
        port = int(args.port) if args.port.isdigit() else args.port
        if not monitor.open_port(port):
            print(f"Could not open MIDI input {args.port!r}")
            return 1
        # Reconnect to the same device by name
        monitor.device_keyword = monitor.last_connected_device

    try:
        loop = ControlLoop(engine, monitor, tick_rate=args.tick_rate)
    except ValueError as e:
        parser.error(str(e))
    loop.on_change = _print_outputs

    def signal_handler(signum, frame):
        logger.info("Received signal %s", signum)
        loop.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print("=" * 60)
    print(f"monocv - channel {engine.channel}, reference note {args.reference_note}")
    print("=" * 60)
    print("Waiting for notes...\n")

    loop.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
