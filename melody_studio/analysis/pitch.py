"""Pitch tracking by normalized autocorrelation."""

import logging
from typing import Optional

import numpy as np

from ..core.config import AnalysisConfig
from ..core.progress import ProgressCallback

logger = logging.getLogger(__name__)


def hz_to_midi(frequencies: np.ndarray) -> np.ndarray:
    """Convert Hz to continuous MIDI pitch; unvoiced (<= 0) frames become NaN."""
    frequencies = np.asarray(frequencies, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        midi = 69 + 12 * np.log2(frequencies / 440.0)
    return np.where(frequencies > 0, midi, np.nan)


class PitchTracker:
    """Per-hop fundamental frequency estimation for a single voice.

    Each hop-aligned window is judged unvoiced when its mean absolute
    amplitude is below ``silence_threshold``; otherwise the lag with the
    strongest normalized autocorrelation inside ``[sr/fmax, sr/fmin]`` gives
    the pitch, provided the correlation exceeds ``correlation_threshold``.
    The raw track is then median-filtered to remove octave jumps.
    """

    def __init__(
        self,
        window_size: int = 2048,
        hop_size: int = 512,
        fmin: float = 80.0,
        fmax: float = 1000.0,
        silence_threshold: float = 0.01,
        correlation_threshold: float = 0.25,
        median_window: int = 5,
        octave_tolerance: float = 0.02,
    ):
        """
        Initialize PitchTracker.

        Args:
            window_size: Samples per analysis window
            hop_size: Samples between analysis frames
            fmin: Lowest detectable pitch in Hz
            fmax: Highest detectable pitch in Hz
            silence_threshold: Mean absolute amplitude below which a frame is unvoiced
            correlation_threshold: Minimum correlation for a voiced frame
            median_window: Width of the median smoothing filter
            octave_tolerance: Prefer the first correlation peak within this
                distance of the global maximum (0 = always take the maximum).
                Guards against sub-octave errors: a 440 Hz tone at 44.1 kHz has
                a period of 100.2 samples, so lag 401 (four periods, almost an
                integer) correlates slightly better than lag 100 and the plain
                maximum would report 110 Hz, two octaves low.
        """
        self.window_size = window_size
        self.hop_size = hop_size
        self.fmin = fmin
        self.fmax = fmax
        self.silence_threshold = silence_threshold
        self.correlation_threshold = correlation_threshold
        self.median_window = median_window
        self.octave_tolerance = octave_tolerance

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "PitchTracker":
        return cls(
            window_size=config.window_size,
            hop_size=config.hop_size,
            fmin=config.fmin,
            fmax=config.fmax,
            silence_threshold=config.silence_threshold,
            correlation_threshold=config.correlation_threshold,
            median_window=config.median_window,
        )

    def hop_duration(self, sr: int) -> float:
        """Seconds between consecutive pitch frames."""
        return self.hop_size / float(sr)

    def track(
        self,
        samples: np.ndarray,
        sr: int,
        progress: Optional[ProgressCallback] = None,
    ) -> np.ndarray:
        """
        Estimate f0 for every hop.

        Args:
            samples: Mono audio array
            sr: Sample rate
            progress: Optional callback receiving the fraction of hops done

        Returns:
            Smoothed f0 track in Hz (0 = unvoiced). Empty when the input is
            shorter than one window.
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.shape[0] <= self.window_size:
            return np.zeros(0, dtype=np.float64)

        min_lag = max(1, int(sr / self.fmax))
        max_lag = min(self.window_size - 1, int(sr / self.fmin))

        starts = range(0, samples.shape[0] - self.window_size, self.hop_size)
        total = len(starts)
        raw = np.zeros(total, dtype=np.float64)

        for idx, i in enumerate(starts):
            frame = samples[i:i + self.window_size]
            raw[idx] = self._estimate_frame(frame, sr, min_lag, max_lag)
            if progress is not None and idx % 64 == 0:
                progress(idx / total)

        voiced = int(np.count_nonzero(raw))
        logger.debug("Pitch track: %d frames, %d voiced before smoothing", total, voiced)
        return self.smooth(raw)

    def _estimate_frame(self, frame: np.ndarray, sr: int, min_lag: int, max_lag: int) -> float:
        """Pitch of one window in Hz, or 0 when unvoiced."""
        if np.mean(np.abs(frame)) < self.silence_threshold:
            return 0.0

        corr = self.normalized_autocorrelation(frame, min_lag, max_lag)
        if corr.size == 0:
            return 0.0

        best = int(np.argmax(corr))
        best_corr = corr[best]
        if best_corr <= 0:
            return 0.0

        # A lag spanning several periods can edge out the true period on integer lags
        if self.octave_tolerance > 0:
            first = int(np.argmax(corr >= best_corr - self.octave_tolerance))
            while first + 1 < corr.size and corr[first + 1] > corr[first]:
                first += 1
            best, best_corr = first, corr[first]

        if best_corr > self.correlation_threshold:
            return sr / float(min_lag + best)
        return 0.0

    @staticmethod
    def normalized_autocorrelation(frame: np.ndarray, min_lag: int, max_lag: int) -> np.ndarray:
        """
        Normalized cross-correlation of a frame with itself for each lag.

        For lag k the value is sum(x[n] * x[n+k]) / sqrt(sum(x[n]^2) * sum(x[n+k]^2))
        over the overlapping part. The raw products come from an FFT
        autocorrelation; the energies from cumulative sums.

        Returns:
            Array indexed by ``lag - min_lag``
        """
        n = frame.shape[0]
        if max_lag < min_lag or min_lag >= n:
            return np.zeros(0, dtype=np.float64)

        spectrum = np.fft.rfft(frame, n=2 * n)
        acf = np.fft.irfft(spectrum * np.conj(spectrum), n=2 * n)[:n]

        energy = np.concatenate(([0.0], np.cumsum(frame * frame)))
        lags = np.arange(min_lag, max_lag + 1)
        x_norm = energy[n - lags]
        y_norm = energy[n] - energy[lags]

        denom = np.sqrt(x_norm * y_norm)
        with np.errstate(divide="ignore", invalid="ignore"):
            values = np.where(denom > 0, acf[lags] / denom, 0.0)
        return values

    def smooth(self, track: np.ndarray) -> np.ndarray:
        """
        Median filter over voiced neighbours.

        Only interior frames are filtered; the first and last
        ``median_window // 2`` frames keep their raw values. A window with no
        voiced frames yields 0.
        """
        track = np.asarray(track, dtype=np.float64)
        half = self.median_window // 2
        if track.shape[0] < self.median_window:
            return track.copy()

        out = track.copy()
        for i in range(half, track.shape[0] - half):
            window = track[i - half:i + half + 1]
            voiced = np.sort(window[window > 0])
            out[i] = voiced[voiced.shape[0] // 2] if voiced.size else 0.0
        return out
