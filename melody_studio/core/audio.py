"""Sample buffer - mono audio captured from a source."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SampleBuffer:
    """Mono float samples at a fixed sample rate. Treated as read-only."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float32)
        if samples.ndim > 1:
            # Down-mix (channels, frames) to mono
            samples = samples.mean(axis=0).astype(np.float32)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @property
    def num_samples(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.num_samples / self.sample_rate

    def slice_seconds(self, start: float, end: float) -> np.ndarray:
        """Samples between two times, clamped to the buffer."""
        first = max(0, int(start * self.sample_rate))
        last = min(self.num_samples, int(end * self.sample_rate))
        if last <= first:
            return np.zeros(0, dtype=np.float32)
        return self.samples[first:last]
