"""
MIDI channel-voice decoding.

Raw messages arrive as packed words with the status byte in the low 8 bits
and the two data bytes above it:

    data2 << 16 | data1 << 8 | status << 4 | channel

The decoder is permissive: anything it does not recognize is ignored, never
reported as an error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import mido

import monocv.config as config

logger = logging.getLogger(__name__)

NOTE_OFF = 0x8
NOTE_ON = 0x9
CONTROL_CHANGE = 0xB
PITCH_BEND = 0xE

# mido message types that carry a channel
CHANNEL_VOICE_TYPES = frozenset([
    'note_off', 'note_on', 'polytouch', 'control_change',
    'program_change', 'aftertouch', 'pitchwheel',
])


@dataclass(frozen=True)
class DecodedEvent:
    """Fields of one raw MIDI word."""

    channel: int
    status: int
    data1: int
    data2: int


def decode(raw: int) -> DecodedEvent:
    """Split a packed raw word into its fields."""
    return DecodedEvent(
        channel=raw & 0xF,
        status=(raw >> 4) & 0xF,
        data1=(raw >> 8) & 0xFF,
        data2=(raw >> 16) & 0xFF,
    )


def pack(status: int, channel: int, data1: int = 0, data2: int = 0) -> int:
    """Build a raw word from a status nibble, channel and data bytes."""
    return ((data2 & 0xFF) << 16) | ((data1 & 0xFF) << 8) | ((status & 0xF) << 4) | (channel & 0xF)


def pack_message(msg: mido.Message) -> Optional[int]:
    """
    Pack a mido message into a raw word.

    Args:
        msg: Message received from a mido input port

    Returns:
        Raw word, or None for messages that are not channel-voice messages
    """
    if msg.type not in CHANNEL_VOICE_TYPES:
        return None

    data = msg.bytes()
    raw = data[0]
    if len(data) > 1:
        raw |= data[1] << 8
    if len(data) > 2:
        raw |= data[2] << 16
    return raw


class MessageDecoder:
    """
    Filters raw words by channel and dispatches them to a voice handler.

    The handler must provide press(note), release_note(note),
    set_pedal(value), reevaluate_after_pedal_change() and
    set_pitch_wheel(value). MonoEngine is the handler used in practice.
    """

    def __init__(self, channel: int = config.MIDI_CHANNEL):
        self.channel = channel

    def dispatch(self, raw: int, handler) -> bool:
        """
        Decode one raw word and apply it to the handler.

        Args:
            raw: Packed MIDI word
            handler: Object receiving the decoded action

        Returns:
            True if the word was on the honored channel and recognized
        """
        event = decode(raw)

        if event.channel != self.channel:
            return False

        logger.debug("channel %d status %d data1 %d data2 %d",
                     event.channel, event.status, event.data1, event.data2)

        if event.status == NOTE_OFF:
            handler.release_note(event.data1)

        elif event.status == NOTE_ON:
            if event.data2:
                handler.press(event.data1)
            else:
                # Velocity 0 note on is a note off
                handler.release_note(event.data1)

        elif event.status == CONTROL_CHANGE:
            if event.data1 != config.SUSTAIN_CONTROLLER:
                return False
            handler.set_pedal(event.data2)
            handler.reevaluate_after_pedal_change()

        elif event.status == PITCH_BEND:
            handler.set_pitch_wheel(event.data2)

        else:
            return False

        return True
