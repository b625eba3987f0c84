"""
Sustain pedal handling and the release decision.

Two events can end or move the sounding note: a key being released and the
pedal changing position. Both apply the same rule once the key (if any) has
been removed from the stack:

- pedal held: leave the voice alone, the sound is sustained
- notes still held: fall back to the most recently pressed one
- nothing held: close the gate
"""
import logging

import monocv.config as config
from monocv.note_stack import NoteStack
from monocv.voice import VoiceState

logger = logging.getLogger(__name__)


class SustainController:
    """Tracks the sustain pedal and decides what sounds after a release."""

    def __init__(self):
        self.held = False

    def set_pedal(self, value: int) -> bool:
        """
        Update the pedal from a sustain controller value.

        Args:
            value: Controller value (0-127), >= 64 means the pedal is down

        Returns:
            True if the pedal position changed
        """
        held = value >= config.PEDAL_THRESHOLD
        changed = held != self.held
        self.held = held
        if changed:
            logger.info("Sustain pedal %s", "down" if held else "up")
        return changed

    def release_note(self, note: int, stack: NoteStack, voice: VoiceState):
        """Remove a released key from the stack and update the voice."""
        stack.release(note)
        self._settle(stack, voice)

    def reevaluate_after_pedal_change(self, stack: NoteStack, voice: VoiceState):
        """Update the voice for the current pedal position without touching the stack."""
        self._settle(stack, voice)

    def _settle(self, stack: NoteStack, voice: VoiceState):
        if self.held:
            return

        top = stack.peek()
        if top is not None:
            voice.current_note = top
        else:
            voice.gate_open = False
