"""
monocv - monophonic MIDI to pitch/gate conversion.
"""
from monocv.engine import MonoEngine
from monocv.voice import Outputs, VoiceState

__all__ = ["MonoEngine", "Outputs", "VoiceState"]
__version__ = "0.1.0"
