"""Musical grid, scale and audition presets."""

from enum import Enum
from typing import Tuple


class QuantizeUnit(Enum):
    """Rhythmic subdivision notes are snapped to."""

    QUARTER = "1/4"
    EIGHTH = "1/8"
    SIXTEENTH = "1/16"

    @property
    def denominator(self) -> int:
        return {"1/4": 4, "1/8": 8, "1/16": 16}[self.value]

    @classmethod
    def parse(cls, value) -> "QuantizeUnit":
        """Accept an enum, its value ('1/8'), its name ('eighth') or a denominator."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for unit in cls:
            if text in (unit.value, unit.name.lower(), str(unit.denominator)):
                return unit
        raise ValueError(f"Unknown quantize unit: {value!r}")


class ScalePreset(Enum):
    """Scales notes can be snapped to."""

    CHROMATIC = "半音阶"
    MAJOR = "自然大调"
    MINOR = "自然小调"
    PENTATONIC = "五声音阶"

    @property
    def degrees(self) -> Tuple[int, ...]:
        """Allowed semitone offsets within one octave."""
        return _SCALE_DEGREES[self.name]

    @classmethod
    def parse(cls, value) -> "ScalePreset":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for scale in cls:
            if text in (scale.value, scale.name, scale.name.lower()):
                return scale
        raise ValueError(f"Unknown scale: {value!r}")


_SCALE_DEGREES = {
    "CHROMATIC": tuple(range(12)),
    "MAJOR": (0, 2, 4, 5, 7, 9, 11),
    "MINOR": (0, 2, 3, 5, 7, 8, 10),
    "PENTATONIC": (0, 2, 4, 7, 9),
}


class AISoloMode(Enum):
    """Restrict an export to a single optimisation category for audition."""

    OFF = "全量"
    RHYTHM = "仅节奏"
    TONE = "仅音色"
    SPACE = "仅空间"

    @classmethod
    def parse(cls, value) -> "AISoloMode":
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for mode in cls:
            if text in (mode.value, mode.name, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown solo mode: {value!r}")
