"""Shared fixtures: synthetic recordings and hand-built note lists."""

import numpy as np
import pytest

from generate_test_audio import SR, generate_hummed_melody, generate_tone_in_silence, write_wav
from melody_studio.core import EditableNote


@pytest.fixture
def sample_rate():
    return SR


@pytest.fixture
def a440_clip():
    """2 s buffer with a 440 Hz tone over [0.2, 1.2]."""
    return generate_tone_in_silence(440.0, 0.2, 1.2, 2.0)


@pytest.fixture
def a440_wav(tmp_path, a440_clip):
    return write_wav(tmp_path / "a440.wav", a440_clip)


@pytest.fixture
def melody_wav(tmp_path):
    """C, E, G hummed with gaps (1.8 s)."""
    return write_wav(tmp_path / "melody.wav", generate_hummed_melody([261.63, 329.63, 392.0]))


@pytest.fixture
def notes():
    """Four slightly sloppy notes around A4, as a hummed take would give."""
    return [
        EditableNote(start_time=0.03, end_time=0.27, detected_midi=69.2),
        EditableNote(start_time=0.29, end_time=0.51, detected_midi=70.6),
        EditableNote(start_time=0.55, end_time=0.74, detected_midi=72.3),
        EditableNote(start_time=0.80, end_time=1.12, detected_midi=66.9),
    ]


@pytest.fixture
def pitch_track():
    """Constant 440 Hz track with a silent lead-in."""
    track = np.full(100, 440.0)
    track[:10] = 0.0
    return track
