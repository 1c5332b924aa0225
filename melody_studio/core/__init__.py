"""Core types and constants for Melody Studio."""

from .note import EditableNote, RenderSegment, clamp_offset, midi_to_name
from .presets import AISoloMode, QuantizeUnit, ScalePreset
from .errors import (
    MelodyStudioError,
    InputUnreadable,
    NoVoicedContent,
    EmptyEditRange,
    RenderTargetUnwritable,
    RenderError,
    SnapshotUnavailable,
)
from .config import AnalysisConfig, RenderConfig, StudioSettings
from .progress import ProgressCallback, ProgressReporter
from .constants import (
    PITCH_NAMES,
    DEFAULT_SR,
    DEFAULT_HOP_LENGTH,
    DEFAULT_WINDOW_SIZE,
    DEFAULT_TEMPO,
)

__all__ = [
    "EditableNote",
    "RenderSegment",
    "clamp_offset",
    "midi_to_name",
    "AISoloMode",
    "QuantizeUnit",
    "ScalePreset",
    "MelodyStudioError",
    "InputUnreadable",
    "NoVoicedContent",
    "EmptyEditRange",
    "RenderTargetUnwritable",
    "RenderError",
    "SnapshotUnavailable",
    "AnalysisConfig",
    "RenderConfig",
    "StudioSettings",
    "ProgressCallback",
    "ProgressReporter",
    "PITCH_NAMES",
    "DEFAULT_SR",
    "DEFAULT_HOP_LENGTH",
    "DEFAULT_WINDOW_SIZE",
    "DEFAULT_TEMPO",
]
