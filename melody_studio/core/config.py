"""Configuration for analysis, rendering and the editing session."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    CORRELATION_THRESHOLD,
    DEFAULT_HOP_LENGTH,
    DEFAULT_SR,
    DEFAULT_TEMPO,
    DEFAULT_WINDOW_SIZE,
    MEDIAN_WINDOW,
    MIN_NOTE_FRAMES,
    PIANO_TAIL_SECONDS,
    SILENCE_THRESHOLD,
    SNAPSHOT_HISTORY_LIMIT,
    VOICE_FMAX,
    VOICE_FMIN,
    WAVEFORM_POINTS,
)


@dataclass
class AnalysisConfig:
    """Configuration for pitch tracking and note segmentation.

    Attributes:
        window_size: Samples per autocorrelation window (default: 2048)
        hop_size: Samples between analysis frames (default: 512)
        fmin: Lowest detectable pitch in Hz (default: 80)
        fmax: Highest detectable pitch in Hz (default: 1000)
        silence_threshold: Mean absolute amplitude below which a frame is unvoiced
        correlation_threshold: Minimum normalized autocorrelation for a voiced frame
        median_window: Width of the octave-jump median filter
        min_note_frames: Shortest voiced run kept as a note
        waveform_points: Number of points in the waveform envelope
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    hop_size: int = DEFAULT_HOP_LENGTH
    fmin: float = VOICE_FMIN
    fmax: float = VOICE_FMAX
    silence_threshold: float = SILENCE_THRESHOLD
    correlation_threshold: float = CORRELATION_THRESHOLD
    median_window: int = MEDIAN_WINDOW
    min_note_frames: int = MIN_NOTE_FRAMES
    waveform_points: int = WAVEFORM_POINTS


@dataclass
class RenderConfig:
    """Configuration for offline rendering.

    Attributes:
        sample_rate: Output sample rate for mix and piano exports
        piano_tail: Seconds of release tail appended to piano renders
        history_limit: Maximum number of kept snapshots
    """

    sample_rate: int = DEFAULT_SR
    piano_tail: float = PIANO_TAIL_SECONDS
    history_limit: int = SNAPSHOT_HISTORY_LIMIT


@dataclass
class StudioSettings:
    """The plain-value configuration surface a front end hands to a session.

    Unknown keys in a settings file are ignored so front ends can store
    their own preferences next to these.
    """

    bpm: float = DEFAULT_TEMPO
    quantize_unit: str = "1/8"
    scale: str = "MAJOR"
    style: str = "pop_fresh"
    tempo: float = 1.0
    beautify: bool = True
    trim_start: Optional[float] = None
    trim_end: Optional[float] = None
    ai_intensity: float = 0.6
    ai_rhythm: bool = True
    ai_tone: bool = True
    ai_space: bool = True
    ai_solo_mode: str = "OFF"
    pinned_snapshot_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudioSettings":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json(cls, path: str) -> "StudioSettings":
        with open(Path(path), "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
