"""Monophonic transcription - the offline analysis job for a recording."""

import logging
from typing import Optional

from .base import AnalysisResult, Transcriber
from .segmenter import NoteSegmenter
from ..analysis import PitchTracker, waveform_envelope
from ..core import (
    AnalysisConfig,
    InputUnreadable,
    NoVoicedContent,
    ProgressCallback,
    ProgressReporter,
)
from ..core.audio import SampleBuffer

logger = logging.getLogger(__name__)


class MonophonicTranscriber(Transcriber):
    """Transcribes a single melodic voice (humming, singing, whistling)."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize MonophonicTranscriber.

        Args:
            config: Analysis settings (window, hop, voice range, thresholds)
        """
        self.config = config or AnalysisConfig()
        self.tracker = PitchTracker.from_config(self.config)
        self.segmenter = NoteSegmenter(min_frames=self.config.min_note_frames)

    def analyze(
        self,
        buffer: SampleBuffer,
        progress: Optional[ProgressCallback] = None,
        require_notes: bool = False,
    ) -> AnalysisResult:
        """
        Run waveform, pitch and note analysis over a buffer.

        Args:
            buffer: Mono samples to analyse
            progress: Optional callback receiving values in [0, 1]
            require_notes: Raise NoVoicedContent instead of returning no notes

        Returns:
            AnalysisResult

        Raises:
            InputUnreadable: If the buffer is shorter than one analysis window
            NoVoicedContent: If require_notes is set and nothing was voiced
        """
        reporter = ProgressReporter(progress)
        reporter(0.05)

        if buffer.num_samples <= self.config.window_size:
            raise InputUnreadable(
                f"Recording too short: {buffer.num_samples} samples, "
                f"need more than {self.config.window_size}"
            )
        reporter(0.2)

        waveform = waveform_envelope(buffer.samples, points=self.config.waveform_points)
        reporter(0.45)

        track = self.tracker.track(
            buffer.samples, buffer.sample_rate, progress=reporter.scaled(0.45, 0.8)
        )
        reporter(0.8)

        hop_duration = self.tracker.hop_duration(buffer.sample_rate)
        notes = self.segmenter.segment(track, hop_duration)
        if require_notes and not notes:
            raise NoVoicedContent("No pitched content detected in recording")

        logger.info("Analysis found %d notes in %.2fs of audio", len(notes), buffer.duration)
        reporter.finish()

        return AnalysisResult(
            duration=buffer.duration,
            hop_duration=hop_duration,
            waveform=waveform,
            pitch_track=track,
            notes=notes,
        )
