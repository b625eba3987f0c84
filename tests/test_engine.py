"""
tests/test_engine.py - Behaviour tests for monocv/engine.py

Tests cover:
- last-note priority on press and release
- sustain pedal holding, pedal-up flush and fallback to held notes
- channel filtering and ignored messages
- per-tick processing order and outputs
- constructor validation
"""

from __future__ import annotations

import pytest

from monocv.engine import MonoEngine
from monocv.voice import VoiceState
from tests.conftest import bend, note_off, note_on, sustain

# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


class TestInitialState:
    def test_silent_on_reference_note(self, engine: MonoEngine) -> None:
        assert engine.voice == VoiceState(current_note=64, gate_open=False, pitch_wheel=64)
        assert not engine.pedal_held
        assert engine.held_notes == ()

    def test_outputs_are_zero(self, engine: MonoEngine) -> None:
        outputs = engine.outputs()
        assert outputs.gate == 0.0
        assert outputs.pitch == 0.0


# ---------------------------------------------------------------------------
# Last-note priority
# ---------------------------------------------------------------------------


class TestPriority:
    def test_press_opens_gate(self, engine: MonoEngine) -> None:
        engine.process(note_on(60))
        assert engine.voice.gate_open
        assert engine.voice.current_note == 60

    def test_latest_press_wins(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(67)])
        assert engine.voice.current_note == 67
        assert engine.held_notes == (60, 67)

    def test_double_press_single_entry(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(60)])
        assert engine.held_notes == (60,)

    def test_release_top_falls_back(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(64), note_off(64)])
        assert engine.voice.current_note == 60
        assert engine.voice.gate_open

    def test_release_buried_note_keeps_top(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(64), note_off(60)])
        assert engine.voice.current_note == 64
        assert engine.held_notes == (64,)

    def test_falls_back_to_most_recent_remaining(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(62), note_on(64), note_on(60), note_off(60)])
        assert engine.voice.current_note == 64
        engine.process(note_off(64))
        assert engine.voice.current_note == 62

    def test_release_last_note_closes_gate(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_off(60)])
        assert not engine.voice.gate_open
        assert engine.voice.current_note == 60

    def test_velocity_zero_matches_note_off(self) -> None:
        with_off = MonoEngine()
        with_zero = MonoEngine()
        with_off.process_all([note_on(60), note_on(64), note_off(64)])
        with_zero.process_all([note_on(60), note_on(64), note_on(64, velocity=0)])
        assert with_off.voice == with_zero.voice
        assert with_off.held_notes == with_zero.held_notes

    def test_release_unheld_note_with_nothing_held(self, engine: MonoEngine) -> None:
        engine.process(note_off(70))
        assert not engine.voice.gate_open
        assert engine.held_notes == ()


# ---------------------------------------------------------------------------
# Sustain pedal
# ---------------------------------------------------------------------------


class TestSustain:
    def test_pedal_holds_released_note(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), sustain(127), note_off(60)])
        assert engine.voice.gate_open
        assert engine.voice.current_note == 60
        assert engine.held_notes == ()

    def test_pedal_up_with_nothing_held_silences(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), sustain(127), note_off(60), sustain(0)])
        assert not engine.voice.gate_open
        assert not engine.pedal_held

    def test_pedal_up_falls_back_to_held_note(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(64), sustain(100), note_off(64)])
        assert engine.voice.current_note == 64
        engine.process(sustain(10))
        assert engine.voice.current_note == 60
        assert engine.voice.gate_open

    def test_press_while_sustained_sounds_new_note(self, engine: MonoEngine) -> None:
        engine.process_all([sustain(127), note_on(60), note_off(60), note_on(62)])
        assert engine.voice.current_note == 62
        assert engine.held_notes == (62,)

    def test_pedal_threshold(self, engine: MonoEngine) -> None:
        engine.process(sustain(63))
        assert not engine.pedal_held
        engine.process(sustain(64))
        assert engine.pedal_held

    def test_pedal_down_does_not_reattack(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_off(60)])
        engine.process(sustain(127))
        assert not engine.voice.gate_open

    def test_pedal_down_keeps_sounding_note(self, engine: MonoEngine) -> None:
        engine.process_all([note_on(60), note_on(64)])
        engine.process(sustain(127))
        assert engine.voice.current_note == 64
        assert engine.voice.gate_open

    def test_pedal_up_without_notes_when_silent(self, engine: MonoEngine) -> None:
        engine.process(sustain(0))
        assert not engine.voice.gate_open
        assert engine.voice.current_note == 64


# ---------------------------------------------------------------------------
# Channel filter and ignored messages
# ---------------------------------------------------------------------------


class TestFiltering:
    def test_other_channel_changes_nothing(self, engine: MonoEngine) -> None:
        engine.process(note_on(60))
        before = (VoiceState(**vars(engine.voice)), engine.held_notes, engine.pedal_held)
        engine.process_all([
            note_on(72, channel=1),
            note_off(60, channel=1),
            sustain(127, channel=1),
            bend(0, channel=1),
        ])
        assert (engine.voice, engine.held_notes, engine.pedal_held) == before

    def test_configured_channel(self) -> None:
        engine = MonoEngine(channel=5)
        engine.process(note_on(60, channel=0))
        assert not engine.voice.gate_open
        engine.process(note_on(60, channel=5))
        assert engine.voice.gate_open

    def test_process_all_counts_handled(self, engine: MonoEngine) -> None:
        handled = engine.process_all([note_on(60), note_on(61, channel=3), 0xF0 | 0xA])
        assert handled == 1

    def test_pitch_bend_stored(self, engine: MonoEngine) -> None:
        engine.process(bend(96))
        assert engine.voice.pitch_wheel == 96
        assert not engine.voice.gate_open


# ---------------------------------------------------------------------------
# Ticks
# ---------------------------------------------------------------------------


class TestTick:
    def test_order_within_tick(self, engine: MonoEngine) -> None:
        outputs = engine.tick([note_on(60), note_off(60)])
        assert outputs.gate == 0.0

        outputs = engine.tick([note_off(62), note_on(62)])
        assert outputs.gate == 5.0
        assert outputs.pitch == pytest.approx((62 - 64) / 12.0)

    def test_empty_tick_is_normal(self, engine: MonoEngine) -> None:
        engine.tick([note_on(76)])
        outputs = engine.tick()
        assert outputs.gate == 5.0
        assert outputs.pitch == pytest.approx(1.0)

    def test_bend_in_outputs(self, engine: MonoEngine) -> None:
        outputs = engine.tick([note_on(76), bend(96)])
        assert outputs.pitch == pytest.approx(13.0 / 12.0)

    def test_engines_share_nothing(self) -> None:
        a = MonoEngine()
        b = MonoEngine()
        a.process_all([note_on(60), sustain(127)])
        assert b.held_notes == ()
        assert not b.pedal_held
        assert not b.voice.gate_open


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    @pytest.mark.parametrize("channel", [-1, 16, 1.0, True, "0"])
    def test_bad_channel(self, channel) -> None:
        with pytest.raises(ValueError):
            MonoEngine(channel=channel)

    @pytest.mark.parametrize("note", [-1, 128])
    def test_bad_reference_note(self, note: int) -> None:
        with pytest.raises(ValueError):
            MonoEngine(reference_note=note)

    def test_negative_bend_range(self) -> None:
        with pytest.raises(ValueError):
            MonoEngine(bend_range_semitones=-1.0)

    def test_custom_scaling(self) -> None:
        engine = MonoEngine(reference_note=60, bend_range_semitones=12.0, gate_level=10.0)
        outputs = engine.tick([note_on(72), bend(0)])
        assert outputs.gate == 10.0
        assert outputs.pitch == pytest.approx(0.0)
