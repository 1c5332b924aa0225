"""Offline segment renderer - the mix export job."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from .effects import ChainSettings, EffectChain
from ..core import (
    AISoloMode,
    DEFAULT_SR,
    ProgressCallback,
    ProgressReporter,
    RenderError,
    RenderSegment,
)
from ..core.state import EffectParameters
from ..input import AudioLoader
from ..output.audio import write_audio

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportRequest:
    """Everything one mix export needs. Built fresh for every export."""

    source_path: str
    output_path: str
    segments: Tuple[RenderSegment, ...]
    tempo: float = 1.0
    beautify: bool = True
    reverb_mix: float = 18.0
    bpm: float = 100.0
    ai_enabled: bool = False
    ai_tone: bool = True
    ai_space: bool = True
    effects: EffectParameters = field(default_factory=EffectParameters)
    solo_mode: AISoloMode = AISoloMode.OFF


class SegmentRenderer:
    """Renders an ExportRequest segment by segment into one output file."""

    def __init__(self, sample_rate: int = DEFAULT_SR):
        """
        Initialize SegmentRenderer.

        Args:
            sample_rate: Rate the source is resampled to and the output written at
        """
        self.sample_rate = sample_rate

    def render(self, request: ExportRequest, progress: Optional[ProgressCallback] = None) -> Path:
        """
        Render the request to ``request.output_path``.

        Args:
            request: Export parameters and segment list
            progress: Optional callback receiving values in [0, 1]

        Returns:
            Path of the written file

        Raises:
            RenderError: If there are no segments or nothing rendered
            InputUnreadable: If the source cannot be decoded
            RenderTargetUnwritable: If the output cannot be written
        """
        if not request.segments:
            raise RenderError("Nothing to render: segment list is empty")

        reporter = ProgressReporter(progress)
        buffer = AudioLoader(target_sr=self.sample_rate).load_buffer(request.source_path)
        reporter(0.05)

        audio = self.render_buffer(buffer, request, progress=reporter.scaled(0.05, 0.95))
        path = write_audio(request.output_path, audio, self.sample_rate)
        reporter.finish()
        return path

    def render_buffer(self, buffer, request: ExportRequest, progress: Optional[ProgressCallback] = None) -> np.ndarray:
        """Render all segments of ``request`` from an in-memory buffer."""
        settings = ChainSettings.from_request(request)
        chain = EffectChain(settings, buffer.sample_rate)
        logger.debug("Effect chain: %s", settings)

        blocks = []
        total = len(request.segments)
        for idx, segment in enumerate(request.segments):
            block = buffer.slice_seconds(segment.start, max(segment.end, segment.start + 0.01))
            rendered = chain.process(block, segment.cents)
            if rendered.size == 0:
                logger.warning(
                    "Segment %.3f-%.3fs rendered no frames, skipping", segment.start, segment.end
                )
            else:
                blocks.append(rendered)
            if progress is not None:
                progress((idx + 1) / total)

        if not blocks:
            raise RenderError("No segment produced any audio")
        return np.concatenate(blocks)
