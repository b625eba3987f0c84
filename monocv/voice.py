"""
Voice state and the mapping from voice state to gate/pitch outputs.
"""
from dataclasses import dataclass

import monocv.config as config


@dataclass
class VoiceState:
    """What the monophonic voice is doing right now."""

    current_note: int = config.REFERENCE_NOTE
    gate_open: bool = False
    pitch_wheel: int = config.WHEEL_CENTER


@dataclass(frozen=True)
class Outputs:
    """Gate and pitch levels sampled once per control cycle."""

    gate: float
    pitch: float


class OutputMapper:
    """
    Computes the gate and pitch outputs from a VoiceState.

    Pitch uses 1 unit per octave: each semitone away from the reference note
    adds 1/12, and the pitch wheel adds up to +/- bend_range_semitones.
    """

    def __init__(self,
                 reference_note: int = config.REFERENCE_NOTE,
                 bend_range_semitones: float = config.BEND_RANGE_SEMITONES,
                 gate_level: float = config.GATE_LEVEL):
        self.reference_note = reference_note
        self.bend_range_semitones = bend_range_semitones
        self.gate_level = gate_level

    def gate(self, voice: VoiceState) -> float:
        return self.gate_level if voice.gate_open else 0.0

    def pitch(self, voice: VoiceState) -> float:
        bend = self.bend_range_semitones * (voice.pitch_wheel - config.WHEEL_CENTER) / 64.0
        return ((voice.current_note - self.reference_note) + bend) / 12.0

    def compute(self, voice: VoiceState) -> Outputs:
        return Outputs(gate=self.gate(voice), pitch=self.pitch(voice))
