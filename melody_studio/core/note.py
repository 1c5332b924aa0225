"""Note and segment data classes - the units the editor works on."""

import uuid
from dataclasses import dataclass, field, replace

import numpy as np

from .constants import MAX_SEMITONE_OFFSET, PITCH_NAMES


def clamp_offset(offset: int) -> int:
    """Clamp a semitone offset into the editable range."""
    return max(-MAX_SEMITONE_OFFSET, min(MAX_SEMITONE_OFFSET, int(offset)))


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class EditableNote:
    """A detected note the user can move and transpose.

    ``detected_midi`` is the pitch measured by analysis and never changes;
    edits only touch the timing and ``semitone_offset``.
    """

    start_time: float  # Start time in seconds
    end_time: float  # End time in seconds
    detected_midi: float  # Continuous MIDI pitch (median of the voiced run)
    semitone_offset: int = 0
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        self.semitone_offset = clamp_offset(self.semitone_offset)

    @property
    def duration(self) -> float:
        """Note duration in seconds."""
        return max(0.0, self.end_time - self.start_time)

    @property
    def output_midi(self) -> float:
        """Pitch after the user's transposition."""
        return self.detected_midi + self.semitone_offset

    @property
    def pitch_name(self) -> str:
        """Get note name of the output pitch (e.g., 'C4', 'A#3')."""
        return midi_to_name(self.output_midi)

    def with_offset(self, offset: int) -> "EditableNote":
        """Copy of this note with a new (clamped) semitone offset."""
        return replace(self, semitone_offset=clamp_offset(offset))

    def with_times(self, start_time: float, end_time: float) -> "EditableNote":
        """Copy of this note moved to a new time span."""
        return replace(self, start_time=start_time, end_time=end_time)

    def copy(self) -> "EditableNote":
        return replace(self)

    @staticmethod
    def freq_to_midi(freq: float) -> float:
        """Convert frequency (Hz) to continuous MIDI pitch."""
        if freq <= 0:
            return 0.0
        return float(69 + 12 * np.log2(freq / 440.0))

    @staticmethod
    def midi_to_freq(midi: float) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return 440.0 * (2 ** ((midi - 69) / 12.0))


def midi_to_name(midi: float) -> str:
    """Name of the nearest semitone, e.g. 69.2 -> 'A4'."""
    rounded = int(round(midi))
    octave = (rounded // 12) - 1
    return f"{PITCH_NAMES[rounded % 12]}{octave}"


@dataclass(frozen=True)
class RenderSegment:
    """A contiguous span of audio rendered with one pitch shift."""

    start: float
    end: float
    cents: float

    @property
    def duration(self) -> float:
        return self.end - self.start
