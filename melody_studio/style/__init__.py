"""Style layer - Presets, transforms, AI optimisation and snapshots."""

from .profiles import STYLE_PROFILES, StyleProfile, get_style
from .engine import (
    apply_pattern_offsets,
    apply_style,
    apply_swing,
    clear_note_offsets,
    quantize_state,
)
from .optimizer import derive_space_parameters, derive_tone_parameters, optimize
from .snapshots import AISnapshot, SnapshotStore

__all__ = [
    "STYLE_PROFILES",
    "StyleProfile",
    "get_style",
    "apply_pattern_offsets",
    "apply_style",
    "apply_swing",
    "clear_note_offsets",
    "quantize_state",
    "derive_space_parameters",
    "derive_tone_parameters",
    "optimize",
    "AISnapshot",
    "SnapshotStore",
]
