#!/usr/bin/env python3
"""
Quick test to detect MIDI devices and watch the engine react to them.
"""
import sys

import mido

from monocv.decoder import decode, pack_message
from monocv.engine import MonoEngine

STATUS_NAMES = {0x8: "note off", 0x9: "note on", 0xB: "control", 0xE: "pitch bend"}

print("Checking for MIDI devices...")
print("=" * 50)

input_names = mido.get_input_names()
print(f"Available MIDI inputs: {len(input_names)}")
for i, name in enumerate(input_names):
    print(f"  [{i}] {name}")

if not input_names:
    print("\nNo MIDI devices found!")
    sys.exit(1)

index = int(sys.argv[1]) if len(sys.argv) > 1 else 0
engine = MonoEngine()

print("\n" + "=" * 50)
print(f"Opening {input_names[index]}...")
print("Play some notes! Press Ctrl+C to stop.")
print("=" * 50 + "\n")

try:
    with mido.open_input(input_names[index]) as inport:
        for msg in inport:
            raw = pack_message(msg)
            if raw is None:
                print(f"Skipped: {msg}")
                continue
            event = decode(raw)
            outputs = engine.tick([raw])
            kind = STATUS_NAMES.get(event.status, f"status {event.status:#x}")
            print(f"ch {event.channel:2d} {kind:10s} {event.data1:3d} {event.data2:3d} "
                  f"-> gate {outputs.gate:3.1f} pitch {outputs.pitch:+.4f} held {list(engine.held_notes)}")
except KeyboardInterrupt:
    print("\n\nStopping. Goodbye!")
