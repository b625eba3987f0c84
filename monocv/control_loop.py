"""
Fixed-rate control loop driving the engine from a MIDI transport.
"""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import monocv.config as config
from monocv.engine import MonoEngine
from monocv.midi_monitor import MidiMonitor
from monocv.voice import Outputs

logger = logging.getLogger(__name__)


class ControlLoop:
    """
    Runs one engine tick per control cycle.

    Each tick drains the monitor, applies the messages in arrival order and
    publishes the resulting outputs.
    """

    def __init__(self, engine: MonoEngine, monitor: MidiMonitor, tick_rate: float = config.TICK_RATE):
        """
        Initialize the control loop.

        Args:
            engine: Engine to drive
            monitor: Transport supplying raw MIDI words
            tick_rate: Ticks per second

        Raises:
            ValueError: If tick_rate is not positive
        """
        if tick_rate <= 0:
            raise ValueError(f"Tick rate must be positive, got {tick_rate!r}")

        self.engine = engine
        self.monitor = monitor
        self.tick_rate = tick_rate
        self.running = False
        self.tick_count = 0
        self.last_outputs: Optional[Outputs] = None

        # Callbacks
        self.on_outputs: Optional[Callable[[Outputs], None]] = None  # Every tick
        self.on_change: Optional[Callable[[Outputs], None]] = None  # Only when outputs differ

    def tick(self) -> Outputs:
        """Run a single control cycle."""
        outputs = self.engine.tick(self.monitor.poll())
        self.tick_count += 1

        if self.on_outputs:
            self.on_outputs(outputs)

        if outputs != self.last_outputs:
            self.last_outputs = outputs
            if self.on_change:
                self.on_change(outputs)

        return outputs

    def start(self):
        """
        Run ticks until stop() is called.

        This method blocks. Call from a separate thread if you need
        non-blocking operation.
        """
        self.running = True
        period = 1.0 / self.tick_rate
        logger.info("Control loop started at %.0f Hz", self.tick_rate)

        next_tick = time.monotonic()
        try:
            while self.running:
                self.monitor.ensure_connected()
                self.tick()

                next_tick += period
                delay = next_tick - time.monotonic()
                if delay > 0:
                    time.sleep(delay)
                else:
                    # Fell behind; don't try to catch up with a burst of ticks
                    next_tick = time.monotonic()
        finally:
            self.monitor.disconnect()
            logger.info("Control loop stopped after %d ticks", self.tick_count)

    def stop(self):
        """Stop the loop."""
        self.running = False
