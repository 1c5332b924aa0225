"""Tests for grid and scale quantization."""

import numpy as np
import pytest

from melody_studio.core import EditableNote, QuantizeUnit, ScalePreset
from melody_studio.processing import ScaleQuantizer, clamp_bpm, grid_duration, snap_midi_to_scale


def _times(notes):
    return [t for n in notes for t in (n.start_time, n.end_time)]


class TestGrid:

    def test_grid_duration(self):
        assert grid_duration(120, QuantizeUnit.QUARTER) == pytest.approx(0.5)
        assert grid_duration(120, QuantizeUnit.EIGHTH) == pytest.approx(0.25)
        assert grid_duration(120, QuantizeUnit.SIXTEENTH) == pytest.approx(0.125)

    def test_bpm_is_clamped(self):
        assert clamp_bpm(10) == 40
        assert clamp_bpm(500) == 240
        assert grid_duration(1000, QuantizeUnit.QUARTER) == pytest.approx(0.25)

    def test_unit_parse(self):
        assert QuantizeUnit.parse("1/16") is QuantizeUnit.SIXTEENTH
        assert QuantizeUnit.parse("eighth") is QuantizeUnit.EIGHTH
        assert QuantizeUnit.parse(4) is QuantizeUnit.QUARTER
        with pytest.raises(ValueError):
            QuantizeUnit.parse("1/3")


class TestScaleSnap:

    def test_chromatic_rounds(self):
        assert snap_midi_to_scale(69.4, ScalePreset.CHROMATIC) == 69
        assert snap_midi_to_scale(69.6, ScalePreset.CHROMATIC) == 70

    def test_major(self):
        # A#4 is not in C major; B4 is closer than A4
        assert snap_midi_to_scale(70.4, ScalePreset.MAJOR) == 71
        assert snap_midi_to_scale(60.4, ScalePreset.MAJOR) == 60
        assert snap_midi_to_scale(61.2, ScalePreset.MAJOR) == 62

    def test_minor_and_pentatonic(self):
        assert snap_midi_to_scale(64.0, ScalePreset.MINOR) in (63.0, 65.0)
        assert snap_midi_to_scale(65.2, ScalePreset.PENTATONIC) == 64

    def test_every_result_is_in_scale(self):
        for scale in ScalePreset:
            for tenth in range(480, 840):
                midi = snap_midi_to_scale(tenth / 10.0, scale)
                assert int(midi) % 12 in scale.degrees


class TestScaleQuantizer:
    """Tests for ScaleQuantizer."""

    @pytest.fixture
    def quantizer(self):
        return ScaleQuantizer(bpm=120, quantize_unit=QuantizeUnit.EIGHTH, scale=ScalePreset.MAJOR)

    def test_snaps_to_grid(self, quantizer):
        notes = [EditableNote(start_time=0.27, end_time=0.49, detected_midi=60.0)]
        quantized = quantizer.quantize(notes, clip_duration=2.0)

        assert _times(quantized) == [0.25, 0.5]

    def test_snaps_pitch_via_offset(self, quantizer):
        notes = [EditableNote(start_time=0.0, end_time=0.5, detected_midi=70.4)]
        quantized = quantizer.quantize(notes, clip_duration=2.0)

        assert quantized[0].detected_midi == 70.4
        assert quantized[0].semitone_offset == 1

    def test_input_is_not_modified(self, quantizer, notes):
        before = [n.copy() for n in notes]
        quantizer.quantize(notes, clip_duration=2.0)
        assert notes == before

    def test_empty_input(self, quantizer):
        assert quantizer.quantize([]) == []
        assert quantizer.snap_time([], 1.0) == []

    def test_overlaps_are_resolved(self, quantizer):
        notes = [
            EditableNote(start_time=0.0, end_time=0.6, detected_midi=60.0),
            EditableNote(start_time=0.45, end_time=0.7, detected_midi=62.0),
        ]
        quantized = quantizer.quantize(notes, clip_duration=2.0)

        assert len(quantized) == 2
        assert quantized[1].start_time >= quantized[0].end_time
        assert quantized[1].duration >= quantizer.min_length - 1e-9

    def test_notes_past_clip_end_are_dropped(self, quantizer):
        notes = [
            EditableNote(start_time=0.0, end_time=0.5, detected_midi=60.0),
            EditableNote(start_time=0.9, end_time=1.0, detected_midi=62.0),
        ]
        quantized = quantizer.quantize(notes, clip_duration=0.8)

        assert len(quantized) == 1
        assert all(n.end_time <= 0.8 for n in quantized)

    def test_output_is_time_ordered(self, quantizer, notes):
        quantized = quantizer.quantize(list(reversed(notes)), clip_duration=2.0)
        starts = [n.start_time for n in quantized]
        assert starts == sorted(starts)

    @pytest.mark.parametrize("unit", list(QuantizeUnit))
    @pytest.mark.parametrize("scale", list(ScalePreset))
    def test_idempotent(self, notes, unit, scale):
        quantizer = ScaleQuantizer(bpm=97, quantize_unit=unit, scale=scale)
        once = quantizer.quantize(notes, clip_duration=1.2)
        twice = quantizer.quantize(once, clip_duration=1.2)

        assert _times(twice) == pytest.approx(_times(once))
        assert [n.semitone_offset for n in twice] == [n.semitone_offset for n in once]

    def test_idempotent_at_clip_end(self, quantizer):
        notes = [EditableNote(start_time=0.1, end_time=1.13, detected_midi=64.0)]
        once = quantizer.quantize(notes, clip_duration=1.13)
        twice = quantizer.quantize(once, clip_duration=1.13)

        assert once[0].end_time == pytest.approx(1.13)
        assert _times(twice) == pytest.approx(_times(once))

    def test_end_rounds_to_grid_before_clip(self, quantizer):
        notes = [EditableNote(start_time=0.5, end_time=1.3, detected_midi=64.0)]
        quantized = quantizer.quantize(notes, clip_duration=1.3)

        assert _times(quantized) == [0.5, 1.25]

    def test_end_past_clip_is_clamped_first(self, quantizer):
        notes = [EditableNote(start_time=0.5, end_time=1.6, detected_midi=64.0)]
        once = quantizer.quantize(notes, clip_duration=1.3)
        twice = quantizer.quantize(once, clip_duration=1.3)

        assert _times(once) == [0.5, 1.25]
        assert _times(twice) == _times(once)

    def test_half_cell_note_is_stable(self):
        quantizer = ScaleQuantizer(bpm=113.83, quantize_unit=QuantizeUnit.SIXTEENTH)
        grid = quantizer.grid_duration
        notes = [EditableNote(start_time=0.26, end_time=0.27, detected_midi=60.0)]

        once = quantizer.quantize(notes, clip_duration=2.0)
        twice = quantizer.quantize(once, clip_duration=2.0)

        assert _times(once) == pytest.approx([2 * grid, 2.5 * grid])
        assert _times(twice) == _times(once)


def _random_take(rng):
    """Non-overlapping notes on a 512-sample hop grid, like the segmenter emits."""
    hop = 512 / 44100
    notes = []
    frame = int(rng.integers(0, 20))
    for _ in range(int(rng.integers(1, 12))):
        length = int(rng.integers(3, 60))
        notes.append(EditableNote(frame * hop, (frame + length) * hop, float(rng.uniform(50, 80))))
        frame += length + int(rng.integers(0, 15))
    duration = frame * hop + float(rng.uniform(0.0, 0.3))
    return notes, duration


class TestQuantizeIdempotence:
    """Quantizing an already quantized take changes nothing."""

    @pytest.mark.parametrize("seed", range(10))
    def test_random_takes(self, seed):
        rng = np.random.default_rng(seed)
        units = list(QuantizeUnit)
        scales = list(ScalePreset)

        for _ in range(100):
            quantizer = ScaleQuantizer(
                bpm=float(rng.uniform(30, 250)),
                quantize_unit=units[int(rng.integers(len(units)))],
                scale=scales[int(rng.integers(len(scales)))],
            )
            notes, duration = _random_take(rng)

            once = quantizer.quantize(notes, duration)
            twice = quantizer.quantize(once, duration)

            assert _times(twice) == _times(once)
            assert [n.semitone_offset for n in twice] == [n.semitone_offset for n in once]
            assert all(0 <= n.start_time < n.end_time <= duration for n in once)
