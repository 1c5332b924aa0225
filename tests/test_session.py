"""Tests for the studio session and its exports."""

import json

import numpy as np
import pretty_midi
import pytest
import soundfile as sf

from melody_studio import StudioSession
from melody_studio.core import (
    EditableNote,
    EmptyEditRange,
    InputUnreadable,
    QuantizeUnit,
    ScalePreset,
    SnapshotUnavailable,
    StudioSettings,
)
from melody_studio.transcription import AnalysisResult


@pytest.fixture
def session(notes, pitch_track):
    session = StudioSession()
    session.attach(
        AnalysisResult(
            duration=1.5,
            hop_duration=512 / 44100,
            waveform=np.zeros(240, dtype=np.float32),
            pitch_track=pitch_track,
            notes=notes,
        )
    )
    return session


class TestStudioSettings:

    def test_from_json_ignores_unknown_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"bpm": 90, "scale": "MINOR", "theme": "dark"}))

        settings = StudioSettings.from_json(str(path))
        assert settings.bpm == 90
        assert settings.scale == "MINOR"
        assert settings.to_dict()["quantize_unit"] == "1/8"

    def test_apply_settings(self, session):
        session.apply_settings(
            StudioSettings(bpm=90, quantize_unit="1/16", scale="五声音阶", style="LoFi松弛", trim_start=0.2)
        )
        state = session.state

        assert state.bpm == 90
        assert state.quantize_unit is QuantizeUnit.SIXTEENTH
        assert state.scale is ScalePreset.PENTATONIC
        assert state.style_id == "lofi_chill"
        assert state.trim_range == (0.2, 1.5)


class TestStudioSession:
    """Tests for StudioSession."""

    def test_attach_resets_trim(self, session):
        assert session.state.trim_range == (0.0, 1.5)
        assert len(session.state.notes) == 4

    def test_set_trim_is_clamped(self, session):
        session.set_trim(-1.0, 9.0)
        assert session.state.trim_range == (0.0, 1.5)
        session.set_trim(1.0, 0.5)
        assert session.state.trim_start == 1.0
        assert session.state.trim_end == 1.0

    def test_set_note_offset(self, session):
        note_id = session.state.notes[1].id
        session.set_note_offset(note_id, 40)
        assert session.state.notes[1].semitone_offset == 24

    def test_note_name_includes_global_shift(self, session):
        note = session.state.notes[0]
        assert session.note_name(note.id) == "A4"
        session.apply_style("edm_pulse")
        note = session.state.notes[0]
        assert session.note_name(note.id) == EditableNote(0, 1, note.output_midi + 5).pitch_name
        with pytest.raises(KeyError):
            session.note_name("missing")

    def test_jobs_do_not_mutate_previous_state(self, session):
        before = session.state
        session.quantize()
        assert session.state is not before
        assert before.notes[0].start_time == 0.03

    def test_optimize_and_toggle_ab(self, session):
        original = session.state
        session.optimize(0.8)
        optimized = session.state

        assert optimized.ai_enabled
        assert session.toggle_ab() is True
        assert session.state == original
        assert session.toggle_ab() is False
        assert session.state == optimized

    def test_toggle_ab_before_optimizing(self, session):
        with pytest.raises(SnapshotUnavailable):
            session.toggle_ab()

    def test_apply_snapshot(self, session):
        saved = session.save_snapshot("before style")
        session.apply_style("rnb_soul")
        session.apply_snapshot(saved.id)
        assert session.state.global_shift == 0

    def test_clear_offsets(self, session):
        session.apply_style("lofi_chill")
        session.clear_offsets()
        assert session.state.global_shift == 0
        assert all(n.semitone_offset == 0 for n in session.state.notes)

    def test_base_cents_follows_beautify(self, session):
        session.state.beautify = True
        assert session.base_cents == pytest.approx(0.0, abs=1e-6)
        session.state.beautify = False
        assert session.base_cents == 0.0

    def test_render_segments_cover_trim(self, session):
        session.set_trim(0.1, 1.2)
        segments = session.render_segments()
        assert segments[0].start == pytest.approx(0.1)
        assert segments[-1].end == pytest.approx(1.2)

    def test_export_needs_recording(self, session, tmp_path):
        with pytest.raises(InputUnreadable):
            session.build_export_request(str(tmp_path / "out.wav"))

    def test_pinned_snapshot_is_exported(self, session, a440_wav, tmp_path):
        session.source_path = a440_wav
        pinned = session.save_snapshot("keeper")
        session.toggle_pin(pinned.id)
        session.apply_style("edm_pulse")

        request = session.build_export_request(str(tmp_path / "mix.wav"))
        assert request.bpm == pinned.bpm
        assert session.state.global_shift == 0

    def test_piano_request_empty_range(self, session, a440_wav, tmp_path):
        session.source_path = a440_wav
        session.set_trim(1.3, 1.5)
        with pytest.raises(EmptyEditRange):
            session.build_piano_request(str(tmp_path / "piano.wav"))

    def test_export_midi(self, session, tmp_path):
        session.apply_style("edm_pulse")
        path = session.export_midi(str(tmp_path / "notes.mid"))

        midi = pretty_midi.PrettyMIDI(str(path))
        pitches = [n.pitch for n in midi.instruments[0].notes]
        expected = [int(round(n.output_midi + 5)) for n in session.state.notes]
        assert pitches == expected


class TestSessionEndToEnd:

    def test_load_and_export(self, melody_wav, tmp_path, sample_rate):
        session = StudioSession()
        result = session.load(melody_wav)
        assert len(result.notes) == 3

        session.apply_style("pop_fresh")
        session.optimize(0.5)

        mix = session.export_mix(str(tmp_path / "mix.wav"))
        piano = session.export_piano(str(tmp_path / "piano.wav"))

        mix_data, mix_sr = sf.read(str(mix))
        piano_data, piano_sr = sf.read(str(piano))
        assert mix_sr == piano_sr == sample_rate
        assert mix_data.shape[0] > 0
        assert np.max(np.abs(piano_data)) <= 0.96
        assert piano_data.shape[0] == int((session.state.duration + 0.8) * sample_rate)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(InputUnreadable):
            StudioSession().load(str(tmp_path / "nope.wav"))
