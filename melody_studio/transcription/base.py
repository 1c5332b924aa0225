"""Analysis result and the transcriber interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..core import EditableNote, ProgressCallback
from ..core.audio import SampleBuffer
from ..input import AudioLoader


@dataclass
class AnalysisResult:
    """Everything one analysis run produces."""

    duration: float
    hop_duration: float
    waveform: np.ndarray
    pitch_track: np.ndarray  # Hz per hop, 0 where unvoiced
    notes: List[EditableNote] = field(default_factory=list)

    @property
    def voiced_ratio(self) -> float:
        """Fraction of pitch frames that are voiced."""
        if self.pitch_track.size == 0:
            return 0.0
        return float(np.count_nonzero(self.pitch_track) / self.pitch_track.size)


class Transcriber(ABC):
    """Turns a recording into an AnalysisResult."""

    @abstractmethod
    def analyze(
        self,
        buffer: SampleBuffer,
        progress: Optional[ProgressCallback] = None,
        require_notes: bool = False,
    ) -> AnalysisResult:
        """
        Analyse a sample buffer.

        Args:
            buffer: Mono samples to analyse
            progress: Optional callback receiving values in [0, 1]
            require_notes: Raise NoVoicedContent instead of returning no notes

        Returns:
            AnalysisResult
        """

    def transcribe(self, audio: np.ndarray, sr: int) -> List[EditableNote]:
        """Notes only, for callers that already hold the samples."""
        return self.analyze(SampleBuffer(samples=audio, sample_rate=sr)).notes

    def analyze_file(
        self,
        path: str,
        progress: Optional[ProgressCallback] = None,
        require_notes: bool = False,
    ) -> AnalysisResult:
        """Load a recording from disk and analyse it."""
        buffer = AudioLoader().load_buffer(path)
        return self.analyze(buffer, progress=progress, require_notes=require_notes)
