"""Editable studio state - everything a snapshot captures."""

from dataclasses import dataclass, field, replace
from typing import List

from .constants import DEFAULT_REVERB_MIX, DEFAULT_TEMPO
from .note import EditableNote
from .presets import AISoloMode, QuantizeUnit, ScalePreset


@dataclass(frozen=True)
class EffectParameters:
    """Tone and space parameters derived by AI optimisation."""

    high_pass_hz: float = 50.0
    presence_gain: float = 0.0
    drive: float = 0.0
    delay_mix: float = 0.0


NEUTRAL_TONE = EffectParameters(high_pass_hz=40.0, presence_gain=0.0, drive=0.0)


@dataclass
class StudioState:
    """Notes plus every parameter the editor and exporter read.

    Operations never mutate a state they are given; they work on ``copy()``
    and return it.
    """

    notes: List[EditableNote] = field(default_factory=list)
    duration: float = 0.0
    trim_start: float = 0.0
    trim_end: float = 0.0
    bpm: float = DEFAULT_TEMPO
    quantize_unit: QuantizeUnit = QuantizeUnit.EIGHTH
    scale: ScalePreset = ScalePreset.MAJOR
    style_id: str = "pop_fresh"
    tempo: float = 1.0
    beautify: bool = True
    reverb_mix: float = DEFAULT_REVERB_MIX
    global_shift: int = 0
    swing: float = 0.0
    ai_enabled: bool = False
    ai_intensity: float = 0.6
    ai_rhythm: bool = True
    ai_tone: bool = True
    ai_space: bool = True
    solo_mode: AISoloMode = AISoloMode.OFF
    effects: EffectParameters = field(default_factory=EffectParameters)

    def copy(self) -> "StudioState":
        """Copy with an independent note list."""
        return replace(self, notes=[n.copy() for n in self.notes])

    @property
    def trim_range(self):
        """Trim window clamped into [0, duration]."""
        start = max(0.0, min(self.trim_start, self.duration))
        end = max(start, min(self.trim_end, self.duration))
        return start, end
