"""Audio loading and preprocessing utilities."""

import logging
from pathlib import Path
from typing import Optional, Tuple

import librosa
import numpy as np
import soundfile as sf

from ..core.audio import SampleBuffer
from ..core.errors import InputUnreadable

logger = logging.getLogger(__name__)


class AudioLoader:
    """Handles audio file loading and preprocessing."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4", ".caf", ".aif", ".aiff"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        mono: bool = True,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling (None keeps the file's rate)
            mono: Convert to mono if True
        """
        self.target_sr = target_sr
        self.mono = mono

    def load(self, path: str) -> Tuple[np.ndarray, int]:
        """
        Load audio file and preprocess.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            InputUnreadable: If the file is missing, unsupported or cannot be decoded
        """
        path = Path(path)

        if not path.exists():
            raise InputUnreadable(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise InputUnreadable(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        try:
            audio, sr = librosa.load(
                str(path),
                sr=self.target_sr,
                mono=self.mono,
            )
        except Exception as e:
            raise InputUnreadable(f"Cannot decode {path}: {e}") from e

        if audio.size == 0:
            raise InputUnreadable(f"Audio file is empty: {path}")

        logger.debug("Loaded %s: %d samples at %d Hz", path, audio.shape[-1], sr)
        return audio, int(sr)

    def load_buffer(self, path: str) -> SampleBuffer:
        """Load a file straight into a SampleBuffer."""
        audio, sr = self.load(path)
        return SampleBuffer(samples=audio, sample_rate=sr)

    @staticmethod
    def probe_duration(path: str) -> float:
        """Duration of a file on disk without decoding it fully."""
        try:
            return float(sf.info(str(path)).duration)
        except RuntimeError as e:
            raise InputUnreadable(f"Cannot read {path}: {e}") from e
