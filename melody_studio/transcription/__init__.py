"""Transcription layer - Note-level detection from audio.

This layer converts a pitch track into discrete note events:
- Note segmentation (voiced runs -> notes)
- Monophonic analysis job (waveform + pitch + notes)
"""

from .segmenter import NoteSegmenter
from .base import AnalysisResult, Transcriber
from .monophonic import MonophonicTranscriber

__all__ = [
    "Transcriber",
    "NoteSegmenter",
    "AnalysisResult",
    "MonophonicTranscriber",
]
