"""Tests for piano synthesis."""

import numpy as np
import pytest
import soundfile as sf

from melody_studio.core import EditableNote, EmptyEditRange, ScalePreset
from melody_studio.style import get_style
from melody_studio.synthesis import PianoRequest, PianoSynthesizer, clip_notes_to_range, estimate_tonic


class TestClipNotesToRange:

    def test_notes_are_moved_to_zero(self):
        notes = [EditableNote(0.5, 1.0, 60.0), EditableNote(1.2, 1.8, 62.0)]
        clipped, duration = clip_notes_to_range(notes, 0.6, 2.0, 2.0)

        assert duration == pytest.approx(1.4)
        assert clipped[0].start_time == pytest.approx(0.0)
        assert clipped[0].end_time == pytest.approx(0.4)
        assert clipped[1].start_time == pytest.approx(0.6)

    def test_originals_untouched(self):
        notes = [EditableNote(0.5, 1.0, 60.0)]
        clip_notes_to_range(notes, 0.6, 2.0, 2.0)
        assert notes[0].start_time == 0.5

    def test_minimum_duration(self):
        notes = [EditableNote(0.0, 0.05, 60.0)]
        _, duration = clip_notes_to_range(notes, 0.0, 0.1, 2.0)
        assert duration == pytest.approx(0.2)

    def test_empty_range(self):
        notes = [EditableNote(0.5, 1.0, 60.0)]
        with pytest.raises(EmptyEditRange):
            clip_notes_to_range(notes, 1.5, 2.0, 2.0)
        with pytest.raises(EmptyEditRange):
            clip_notes_to_range([], 0.0, 2.0, 2.0)


class TestEstimateTonic:

    def test_c_major_melody(self):
        assert estimate_tonic([60, 62, 64, 65, 67, 69, 71], ScalePreset.MAJOR.degrees) == 60

    def test_a_minor_melody(self):
        melody = [57, 59, 60, 62, 64, 65, 67, 69]
        assert estimate_tonic(melody, ScalePreset.MINOR.degrees) % 12 == 9

    def test_tie_goes_to_root_near_median(self):
        # Every root fits a chromatic scale
        assert estimate_tonic([70, 70, 70], ScalePreset.CHROMATIC.degrees) == 70

    def test_no_notes(self):
        assert estimate_tonic([], ScalePreset.MAJOR.degrees) == 60


class TestPianoSynthesizer:
    """Tests for PianoSynthesizer."""

    @pytest.fixture
    def synth(self, sample_rate):
        return PianoSynthesizer(sample_rate=sample_rate)

    @pytest.fixture
    def melody(self):
        return [EditableNote(0.0, 0.3, 60.0), EditableNote(0.3, 0.6, 64.0), EditableNote(0.6, 1.0, 67.0)]

    def test_output_length(self, synth, melody, sample_rate):
        pcm = synth.synthesize(melody, 1.0, 100, ScalePreset.MAJOR, get_style("pop_fresh"))
        assert pcm.shape[0] == int((1.0 + 0.8) * sample_rate)
        assert pcm.dtype == np.float32

    def test_peak_is_limited(self, synth, melody):
        loud = melody * 4
        pcm = synth.synthesize(loud, 1.0, 200, ScalePreset.MINOR, get_style("edm_pulse"), global_shift=5)
        assert np.max(np.abs(pcm)) <= 0.951

    def test_minimum_length(self, synth, sample_rate):
        pcm = synth.synthesize([], 0.0, 100, ScalePreset.MAJOR, get_style("pop_fresh"))
        assert pcm.shape[0] == int(0.8 * sample_rate)

    def test_add_note_past_end_is_ignored(self, synth):
        buffer = np.zeros(1000)
        synth.add_note(buffer, start=5.0, duration=0.5, midi=60, gain=0.5)
        assert np.all(buffer == 0)

    def test_add_note_is_truncated(self, synth, sample_rate):
        buffer = np.zeros(sample_rate // 10)
        synth.add_note(buffer, start=0.05, duration=1.0, midi=69, gain=0.5)
        assert np.all(buffer[: int(0.05 * sample_rate)] == 0)
        assert np.max(np.abs(buffer)) > 0

    def test_soft_limit(self):
        out = PianoSynthesizer.soft_limit_and_normalize(np.array([0.0, 10.0, -10.0]))
        assert np.max(np.abs(out)) == pytest.approx(0.95)
        quiet = PianoSynthesizer.soft_limit_and_normalize(np.array([0.0, 0.1]))
        assert quiet[1] == pytest.approx(np.tanh(0.125))

    def test_progress(self, synth, melody):
        values = []
        synth.synthesize(melody, 1.0, 100, ScalePreset.MAJOR, get_style("pop_fresh"), progress=values.append)
        assert values == sorted(values)
        assert values[-1] <= 1.0

    def test_render_writes_file(self, synth, melody, tmp_path, sample_rate):
        request = PianoRequest(
            notes=tuple(melody),
            duration=1.0,
            bpm=100,
            scale=ScalePreset.MAJOR,
            style=get_style("pop_fresh"),
            global_shift=0,
            output_path=str(tmp_path / "piano.wav"),
        )
        path = synth.render(request)

        data, sr = sf.read(str(path))
        assert sr == sample_rate
        assert data.shape[0] == int(1.8 * sample_rate)

    def test_render_without_notes(self, synth, tmp_path):
        request = PianoRequest(
            notes=(),
            duration=1.0,
            bpm=100,
            scale=ScalePreset.MAJOR,
            style=get_style("pop_fresh"),
            global_shift=0,
            output_path=str(tmp_path / "piano.wav"),
        )
        with pytest.raises(EmptyEditRange):
            synth.render(request)
        assert not (tmp_path / "piano.wav").exists()
