"""Audio file export."""

import logging
import os
from pathlib import Path

import numpy as np
import soundfile as sf

from ..core import RenderTargetUnwritable

logger = logging.getLogger(__name__)


def write_audio(output_path: str, samples: np.ndarray, sr: int) -> Path:
    """
    Write mono samples to ``output_path``.

    The file is written next to the target under a temporary name and moved
    into place only once complete, so a failed write never leaves a
    truncated file at ``output_path``.

    Raises:
        RenderTargetUnwritable: If the directory or file cannot be written
    """
    path = Path(output_path)
    partial = path.with_name(f".{path.stem}.partial{path.suffix}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(partial), np.asarray(samples, dtype=np.float32), sr)
        os.replace(partial, path)
    except (OSError, RuntimeError, TypeError, ValueError) as e:
        if partial.exists():
            partial.unlink()
        raise RenderTargetUnwritable(f"Cannot write {path}: {e}") from e

    logger.info("Wrote %s (%.2fs)", path, len(samples) / float(sr))
    return path
