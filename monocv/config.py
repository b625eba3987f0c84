"""
Configuration for monocv
"""

# MIDI channel honored by the engine (0-15); all other channels are dropped
MIDI_CHANNEL = 0

# Output scaling
REFERENCE_NOTE = 64  # Note that produces a pitch output of 0.0
BEND_RANGE_SEMITONES = 2.0  # Full pitch wheel deflection, in semitones
GATE_LEVEL = 5.0  # Gate output while a note sounds

# MIDI constants
SUSTAIN_CONTROLLER = 0x40
PEDAL_THRESHOLD = 64  # Sustain values >= this mean the pedal is down
WHEEL_CENTER = 64
NOTE_RANGE = range(128)

# Control loop
TICK_RATE = 1000.0  # Ticks per second

# Default MIDI device keyword (empty picks the first non "Midi Through" port)
MIDI_DEVICE_KEYWORD = ''
RECONNECT_INTERVAL = 5.0  # Seconds between reconnection attempts
HEALTH_CHECK_INTERVAL = 2.0  # Seconds between device health checks

LOG_FILE = 'monocv.log'
