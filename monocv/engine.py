"""
Monophonic MIDI to pitch/gate engine.

The engine is a pure state machine. A transport hands it raw MIDI words,
in arrival order, once per control cycle; the host then reads the gate and
pitch outputs. It performs no I/O and is not thread-safe: one caller drives it.
"""
from __future__ import annotations

import logging
from typing import Iterable, Tuple

import monocv.config as config
from monocv.decoder import MessageDecoder
from monocv.note_stack import NoteStack
from monocv.sustain import SustainController
from monocv.voice import OutputMapper, Outputs, VoiceState

logger = logging.getLogger(__name__)


class MonoEngine:
    """
    Last-note-priority monophonic voice with sustain pedal.

    Voice states:
    - Silent: gate closed
    - Sounding(note): gate open on current_note

    The sustain pedal only affects transitions triggered by a release.
    """

    def __init__(self,
                 channel: int = config.MIDI_CHANNEL,
                 reference_note: int = config.REFERENCE_NOTE,
                 bend_range_semitones: float = config.BEND_RANGE_SEMITONES,
                 gate_level: float = config.GATE_LEVEL):
        """
        Initialize the engine.

        Args:
            channel: MIDI channel to honor (0-15)
            reference_note: Note producing a pitch output of 0.0 (0-127)
            bend_range_semitones: Pitch wheel range in semitones (>= 0)
            gate_level: Gate output while a note sounds

        Raises:
            ValueError: If any argument is out of range
        """
        if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 15:
            raise ValueError(f"MIDI channel must be an integer 0-15, got {channel!r}")
        if reference_note not in config.NOTE_RANGE:
            raise ValueError(f"Reference note must be 0-127, got {reference_note!r}")
        if bend_range_semitones < 0:
            raise ValueError(f"Bend range must not be negative, got {bend_range_semitones!r}")

        self.decoder = MessageDecoder(channel)
        self.stack = NoteStack()
        self.sustain = SustainController()
        self.mapper = OutputMapper(reference_note, bend_range_semitones, gate_level)
        self._voice = VoiceState()

    @property
    def channel(self) -> int:
        return self.decoder.channel

    @property
    def voice(self) -> VoiceState:
        return self._voice

    @property
    def pedal_held(self) -> bool:
        return self.sustain.held

    @property
    def held_notes(self) -> Tuple[int, ...]:
        return self.stack.notes

    # Handler surface used by MessageDecoder

    def press(self, note: int):
        """Start sounding a note, making it the highest priority."""
        self.stack.press(note)
        self._voice.gate_open = True
        self._voice.current_note = note

    def release_note(self, note: int):
        """Handle a key release (note off, or note on with velocity 0)."""
        self.sustain.release_note(note, self.stack, self._voice)

    def reevaluate_after_pedal_change(self):
        """Re-derive the voice after the pedal moved."""
        self.sustain.reevaluate_after_pedal_change(self.stack, self._voice)

    def set_pedal(self, value: int) -> bool:
        return self.sustain.set_pedal(value)

    def set_pitch_wheel(self, value: int):
        self._voice.pitch_wheel = value

    # Per-cycle interface

    def process(self, raw: int) -> bool:
        """
        Apply one raw MIDI word.

        Returns:
            True if the word was on the honored channel and acted on
        """
        return self.decoder.dispatch(raw, self)

    def process_all(self, raws: Iterable[int]) -> int:
        """
        Apply raw MIDI words strictly in the given order.

        Returns:
            Number of words that were acted on
        """
        handled = 0
        for raw in raws:
            if self.process(raw):
                handled += 1
        return handled

    def outputs(self) -> Outputs:
        """Current gate and pitch outputs."""
        return self.mapper.compute(self._voice)

    def tick(self, raws: Iterable[int] = ()) -> Outputs:
        """Run one control cycle: apply pending words, then compute outputs."""
        self.process_all(raws)
        return self.outputs()

    def __repr__(self) -> str:
        return (f"MonoEngine(channel={self.channel}, voice={self._voice!r}, "
                f"pedal={self.pedal_held}, held={list(self.held_notes)})")
