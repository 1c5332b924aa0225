"""Decimated waveform envelope for display."""

import numpy as np


def waveform_envelope(samples: np.ndarray, points: int = 240, gain: float = 6.5) -> np.ndarray:
    """
    RMS of ``points`` equal chunks, scaled by ``gain`` and clamped to [0, 1].

    Args:
        samples: Mono audio array
        points: Number of envelope points (fewer if there are fewer samples)
        gain: Linear gain applied before clamping

    Returns:
        Envelope array of length ``min(points, len(samples))``
    """
    samples = np.asarray(samples, dtype=np.float64)
    if samples.size == 0 or points <= 0:
        return np.zeros(0, dtype=np.float32)

    chunks = np.array_split(samples, min(points, samples.size))
    rms = np.array([np.sqrt(np.mean(chunk * chunk)) for chunk in chunks])
    return np.clip(rms * gain, 0.0, 1.0).astype(np.float32)
