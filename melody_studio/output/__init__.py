"""Output layer - Export rendered audio and edited notes."""

from .audio import write_audio
from .midi import MIDIExporter

__all__ = [
    "write_audio",
    "MIDIExporter",
]
