"""Note quantization - Snap notes to a rhythmic grid and a musical scale."""

import logging
import math
from typing import List, Optional

from ..core import EditableNote, QuantizeUnit, ScalePreset
from ..core.constants import MAX_BPM, MIN_BPM

logger = logging.getLogger(__name__)

# Tolerance, in grid cells, for a time sitting exactly between two grid lines
_TIE_EPS = 1e-6


def clamp_bpm(bpm: float) -> float:
    return max(MIN_BPM, min(MAX_BPM, float(bpm)))


def grid_duration(bpm: float, unit: QuantizeUnit) -> float:
    """Duration of one grid cell in seconds."""
    return (60.0 / clamp_bpm(bpm)) * (4.0 / unit.denominator)


def snap_midi_to_scale(midi: float, scale: ScalePreset) -> float:
    """
    Closest pitch in ``scale`` (rooted on C) to a continuous MIDI value.

    Candidates are searched in the note's octave and two octaves either side.
    The chromatic scale simply rounds to the nearest semitone.
    """
    if scale is ScalePreset.CHROMATIC:
        return float(math.floor(midi + 0.5))

    best = midi
    best_distance = math.inf
    octave = int(math.floor(midi / 12.0))
    for o in range(octave - 2, octave + 3):
        for degree in scale.degrees:
            candidate = float(o * 12 + degree)
            distance = abs(candidate - midi)
            if distance < best_distance:
                best_distance = distance
                best = candidate
    return best


class ScaleQuantizer:
    """Quantize note timings to a rhythmic grid and pitches to a scale."""

    def __init__(
        self,
        bpm: float = 100.0,
        quantize_unit: QuantizeUnit = QuantizeUnit.EIGHTH,
        scale: ScalePreset = ScalePreset.MAJOR,
    ):
        """
        Initialize ScaleQuantizer.

        Args:
            bpm: Tempo in BPM (clamped to 40-240 for grid computation)
            quantize_unit: Grid subdivision
            scale: Scale pitches are snapped to
        """
        self.bpm = bpm
        self.quantize_unit = quantize_unit
        self.scale = scale

    @property
    def beat_duration(self) -> float:
        """Duration of one beat in seconds."""
        return 60.0 / clamp_bpm(self.bpm)

    @property
    def grid_duration(self) -> float:
        """Duration of one grid unit in seconds."""
        return grid_duration(self.bpm, self.quantize_unit)

    @property
    def min_length(self) -> float:
        """Shortest note the time snap produces: half a grid cell."""
        return self.grid_duration * 0.5

    def quantize(
        self, notes: List[EditableNote], clip_duration: Optional[float] = None
    ) -> List[EditableNote]:
        """
        Snap timing to the grid, then pitch to the scale.

        Args:
            notes: Notes to quantize (not modified)
            clip_duration: Length of the recording; ends are clamped to it

        Returns:
            New, time-ordered, non-overlapping notes
        """
        timed = self.snap_time(notes, clip_duration)
        return [self.snap_pitch(note) for note in timed]

    def snap_time(
        self, notes: List[EditableNote], clip_duration: Optional[float] = None
    ) -> List[EditableNote]:
        """
        Snap note starts and ends to the nearest grid line.

        Notes are processed in time order. Ends are snapped, then clamped to
        ``clip_duration``. A note whose snapped start falls before the
        previous note's end is pushed to that end and keeps at least the
        minimum length; if that carries it past ``clip_duration`` it is
        dropped.

        Positions are tracked as whole half-cell counts and only turned
        into seconds on output, so snapping an already snapped list gives
        the same list back.
        """
        if not notes:
            return []

        limit = math.inf if clip_duration is None else float(clip_duration)
        half = self.min_length
        result: List[EditableNote] = []
        prev_end: Optional[int] = None

        for note in sorted(notes, key=lambda n: n.start_time):
            start = max(0, 2 * self._grid_index(note.start_time))
            end = max(start + 1, 2 * self._grid_index(min(note.end_time, limit)))
            end_time = min(end * half, limit)

            if prev_end is not None and start < prev_end:
                start = prev_end
                end = max(end, start + 1)
                end_time = max(end_time, (start + 1) * half)

            start_time = start * half
            if not start_time < end_time <= limit:
                continue
            result.append(note.with_times(start_time, end_time))
            if end * half > limit:
                # Everything after a note cut at the clip end would start past it
                break
            prev_end = end

        dropped = len(notes) - len(result)
        if dropped:
            logger.debug("Time snap dropped %d notes past the clip end", dropped)
        return result

    def snap_pitch(self, note: EditableNote) -> EditableNote:
        """Set the offset so the output pitch lands on the scale."""
        target = snap_midi_to_scale(note.output_midi, self.scale)
        offset = int(math.floor(target - note.detected_midi + 0.5))
        return note.with_offset(offset)

    def _grid_index(self, time: float) -> int:
        """Index of the nearest grid line (ties go to the earlier line)."""
        return int(math.ceil(time / self.grid_duration - 0.5 - _TIE_EPS))
