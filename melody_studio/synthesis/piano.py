"""Piano synthesis - melody voices plus a generated chordal accompaniment."""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..core import (
    DEFAULT_SR,
    EditableNote,
    EmptyEditRange,
    ProgressCallback,
    ProgressReporter,
    ScalePreset,
)
from ..core.constants import PIANO_PEAK, PIANO_TAIL_SECONDS
from ..output.audio import write_audio
from ..processing import clamp_bpm
from ..style.profiles import StyleProfile

logger = logging.getLogger(__name__)

MELODY_GAIN = 0.42
BASS_GAIN = 0.26
FIFTH_GAIN = 0.17
OCTAVE_GAIN = 0.15
SUSTAIN_LEVEL = 0.45
MIN_NOTE_SECONDS = 0.06


@dataclass(frozen=True)
class PianoRequest:
    """Inputs for one piano export."""

    notes: Tuple[EditableNote, ...]
    duration: float
    bpm: float
    scale: ScalePreset
    style: StyleProfile
    global_shift: int
    output_path: str


def clip_notes_to_range(
    notes: Sequence[EditableNote], trim_start: float, trim_end: float, duration: float
) -> Tuple[List[EditableNote], float]:
    """
    Cut notes to the trim window and move them to start at 0.

    Returns:
        Tuple of (clipped notes sorted by start, render duration)

    Raises:
        EmptyEditRange: If no note overlaps the window
    """
    start = max(0.0, min(trim_start, duration))
    end = max(start, min(trim_end, duration))
    render_duration = max(0.2, end - start)

    clipped = []
    for note in notes:
        if note.end_time <= start or note.start_time >= end:
            continue
        s = max(start, note.start_time) - start
        e = min(end, note.end_time) - start
        if e <= s:
            e = s + MIN_NOTE_SECONDS
        clipped.append(note.with_times(s, e))

    if not clipped:
        raise EmptyEditRange("No notes inside the trim range")
    clipped.sort(key=lambda n: n.start_time)
    return clipped, render_duration


def estimate_tonic(midis: Iterable[float], degrees: Iterable[int]) -> int:
    """
    Guess the tonic as the root (MIDI 48-72) under which most melody notes
    fall on the scale; ties go to the root nearest the melody's median.
    """
    values = sorted(int(math.floor(m + 0.5)) for m in midis)
    if not values:
        return 60
    degree_set = set(degrees)
    median = values[len(values) // 2]

    best, best_score = 60, math.inf
    for root in range(48, 73):
        score = sum(1 for m in values if (m - root) % 12 not in degree_set)
        if score < best_score or (score == best_score and abs(root - median) < abs(best - median)):
            best, best_score = root, score
    return best


class PianoSynthesizer:
    """Additive piano-like synthesis into a shared mono buffer."""

    def __init__(self, sample_rate: int = DEFAULT_SR, tail: float = PIANO_TAIL_SECONDS):
        self.sample_rate = sample_rate
        self.tail = tail

    def add_note(self, buffer: np.ndarray, start: float, duration: float, midi: float, gain: float) -> None:
        """
        Mix one voice into ``buffer`` in place.

        Three harmonics (1, 0.46 x 2nd, 0.19 x slightly sharp 3rd) under an
        ADSR envelope and an exponential brightness decay. Parts past the
        end of the buffer are dropped.
        """
        sr = self.sample_rate
        start_index = max(0, int(start * sr))
        note_frames = max(1, int(duration * sr))
        if start_index >= buffer.shape[0]:
            return

        attack = max(1, int(min(0.015, duration * 0.2) * sr))
        decay = max(1, int(min(0.12, duration * 0.3) * sr))
        release = max(1, int(min(0.22, duration * 0.35) * sr))
        sustain_start = min(note_frames, attack + decay)
        release_start = max(sustain_start, note_frames - release)

        n = np.arange(min(note_frames, buffer.shape[0] - start_index))
        env = np.full(n.shape, SUSTAIN_LEVEL)
        env = np.where(n < attack, n / attack, env)
        in_decay = (n >= attack) & (n < sustain_start)
        env = np.where(in_decay, 1 - (1 - SUSTAIN_LEVEL) * (n - attack) / decay, env)
        in_release = n >= release_start
        env = np.where(
            in_release, np.maximum(0.0, SUSTAIN_LEVEL * (1 - (n - release_start) / release)), env
        )

        t = n / sr
        phase = 2 * np.pi * EditableNote.midi_to_freq(midi) * t
        harmonic = np.sin(phase) + 0.46 * np.sin(2 * phase) + 0.19 * np.sin(3.01 * phase)
        brightness = np.exp(-3.6 * t / max(0.05, duration))
        buffer[start_index:start_index + n.shape[0]] += harmonic * env * gain * brightness

    @staticmethod
    def soft_limit_and_normalize(buffer: np.ndarray, peak_target: float = PIANO_PEAK) -> np.ndarray:
        """tanh soft clip, then scale down if the peak exceeds ``peak_target``."""
        out = np.tanh(buffer * 1.25)
        peak = float(np.max(np.abs(out))) if out.size else 0.0
        if peak > 0:
            scale = min(1.0, peak_target / peak)
            if scale < 0.999:
                out *= scale
        return out

    def synthesize(
        self,
        notes: Sequence[EditableNote],
        duration: float,
        bpm: float,
        scale: ScalePreset,
        style: StyleProfile,
        global_shift: int = 0,
        progress: Optional[ProgressCallback] = None,
    ) -> np.ndarray:
        """
        Render melody and accompaniment to a buffer.

        Args:
            notes: Notes positioned relative to the start of the render
            duration: Seconds of music; the output adds ``tail`` seconds
            bpm: Tempo for the one-chord-per-beat accompaniment
            scale: Scale used for tonic estimation and chord choice
            style: Style whose chord progression is used
            global_shift: Transposition applied to every melody note
            progress: Optional callback receiving values in [0, 1]

        Returns:
            float32 buffer of ``int((duration + tail) * sample_rate)`` frames
        """
        reporter = ProgressReporter(progress)
        frames = int(max(0.3, duration + self.tail) * self.sample_rate)
        pcm = np.zeros(frames, dtype=np.float64)
        reporter(0.05)

        melody = [n.output_midi + global_shift for n in notes]
        for idx, (note, midi) in enumerate(zip(notes, melody)):
            self.add_note(
                pcm,
                start=max(0.0, note.start_time),
                duration=max(MIN_NOTE_SECONDS, note.end_time - note.start_time),
                midi=midi,
                gain=MELODY_GAIN,
            )
            reporter(0.1 + 0.45 * (idx + 1) / max(len(notes), 1))

        beat = 60.0 / clamp_bpm(bpm)
        tonic = estimate_tonic(melody, scale.degrees)
        progression = style.chord_progression(scale)
        beat_count = int(math.ceil(duration / beat))
        logger.debug("Accompaniment: tonic %d, %d beats of %s", tonic, beat_count, progression)

        for b in range(beat_count):
            t = b * beat
            root = tonic + progression[b % len(progression)]
            self.add_note(pcm, t, beat * 0.92, root - 12, BASS_GAIN)
            self.add_note(pcm, t, beat * 0.82, root + 7, FIFTH_GAIN)
            self.add_note(pcm, t, beat * 0.82, root + 12, OCTAVE_GAIN)
            reporter(0.58 + 0.3 * (b + 1) / max(beat_count, 1))

        out = self.soft_limit_and_normalize(pcm).astype(np.float32)
        reporter(0.95)
        return out

    def render(self, request: PianoRequest, progress: Optional[ProgressCallback] = None) -> Path:
        """
        Synthesize a request and write it to ``request.output_path``.

        Raises:
            EmptyEditRange: If the request has no notes
            RenderTargetUnwritable: If the output cannot be written
        """
        if not request.notes:
            raise EmptyEditRange("No notes to synthesize")
        reporter = ProgressReporter(progress)
        pcm = self.synthesize(
            request.notes,
            request.duration,
            request.bpm,
            request.scale,
            request.style,
            request.global_shift,
            progress=reporter.scaled(0.0, 0.95),
        )
        path = write_audio(request.output_path, pcm, self.sample_rate)
        reporter.finish()
        return path
