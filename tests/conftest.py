"""
Shared fixtures for the test suite.
"""

from __future__ import annotations

import pytest

from monocv.decoder import CONTROL_CHANGE, NOTE_OFF, NOTE_ON, PITCH_BEND, pack
from monocv.engine import MonoEngine


def note_on(note: int, velocity: int = 100, channel: int = 0) -> int:
    return pack(NOTE_ON, channel, note, velocity)


def note_off(note: int, velocity: int = 0, channel: int = 0) -> int:
    return pack(NOTE_OFF, channel, note, velocity)


def sustain(value: int, channel: int = 0) -> int:
    return pack(CONTROL_CHANGE, channel, 0x40, value)


def bend(msb: int, lsb: int = 0, channel: int = 0) -> int:
    return pack(PITCH_BEND, channel, lsb, msb)


@pytest.fixture
def engine() -> MonoEngine:
    return MonoEngine()
