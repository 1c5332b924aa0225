"""Synthesis layer - Piano rendering from edited notes."""

from .piano import PianoRequest, PianoSynthesizer, clip_notes_to_range, estimate_tonic

__all__ = [
    "PianoRequest",
    "PianoSynthesizer",
    "clip_notes_to_range",
    "estimate_tonic",
]
