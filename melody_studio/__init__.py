"""Melody Studio - Hum a melody, edit its notes, render it back.

Architecture Layers:
    1. input/         - Audio loading
    2. analysis/      - Pitch tracking and waveform envelope
    3. transcription/ - Note segmentation and the analysis job
    4. processing/    - Grid and scale quantization
    5. style/         - Style presets, AI optimisation, snapshots
    6. render/        - Segment planning and the vocal effects chain
    7. synthesis/     - Piano rendering with accompaniment
    8. output/        - Audio and MIDI export
"""

__version__ = "0.1.0"

# Core types
from .core import (
    EditableNote,
    RenderSegment,
    QuantizeUnit,
    ScalePreset,
    AISoloMode,
    MelodyStudioError,
    AnalysisConfig,
    RenderConfig,
    StudioSettings,
)

# Input layer
from .input import AudioLoader

# Analysis layer
from .analysis import PitchTracker

# Transcription layer
from .transcription import NoteSegmenter, MonophonicTranscriber, AnalysisResult

# Processing layer
from .processing import ScaleQuantizer

# Style layer
from .style import STYLE_PROFILES, StyleProfile, SnapshotStore, apply_style, optimize

# Render layer
from .render import ExportRequest, SegmentRenderer, build_render_segments

# Synthesis layer
from .synthesis import PianoRequest, PianoSynthesizer

# Output layer
from .output import MIDIExporter, write_audio

from .session import StudioSession

__all__ = [
    # Core
    "EditableNote",
    "RenderSegment",
    "QuantizeUnit",
    "ScalePreset",
    "AISoloMode",
    "MelodyStudioError",
    "AnalysisConfig",
    "RenderConfig",
    "StudioSettings",
    # Input
    "AudioLoader",
    # Analysis
    "PitchTracker",
    # Transcription
    "NoteSegmenter",
    "MonophonicTranscriber",
    "AnalysisResult",
    # Processing
    "ScaleQuantizer",
    # Style
    "STYLE_PROFILES",
    "StyleProfile",
    "SnapshotStore",
    "apply_style",
    "optimize",
    # Render
    "ExportRequest",
    "SegmentRenderer",
    "build_render_segments",
    # Synthesis
    "PianoRequest",
    "PianoSynthesizer",
    # Output
    "MIDIExporter",
    "write_audio",
    # Session
    "StudioSession",
]
