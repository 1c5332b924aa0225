"""Fixed effect chain: pitch/time -> filter -> drive -> delay -> reverb.

The chain is configured once per render by a declarative ChainSettings
record; per-segment only the pitch shift changes. Stages whose category is
inactive are bypassed.
"""

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import librosa
import numpy as np
from scipy.signal import butter, fftconvolve, lfilter, sosfilt

from ..core import AISoloMode
from ..core.constants import (
    DELAY_BEAT_FRACTION,
    PRESENCE_FREQ_HZ,
    RENDER_TAIL_SECONDS,
)
from ..processing import clamp_bpm

logger = logging.getLogger(__name__)

N_FFT = 2048
DELAY_FEEDBACK = 0.18
DRIVE_CURVE = 3.0
REVERB_SECONDS = 1.4
REVERB_DECAY = 3.2


@dataclass(frozen=True)
class ChainSettings:
    """Per-render effect parameters and stage activation."""

    tempo: float = 1.0
    tone_active: bool = False
    high_pass_hz: float = 40.0
    presence_gain: float = 0.0
    drive: float = 0.0  # wet percent
    space_active: bool = False
    delay_time: float = 0.3
    delay_feedback: float = DELAY_FEEDBACK
    delay_mix: float = 0.0  # wet percent
    reverb_mix: float = 0.0  # wet percent

    @classmethod
    def from_request(cls, request) -> "ChainSettings":
        """
        Derive stage activation from the AI flags and the solo mode.

        Tone and space are active only when AI is enabled, the category is
        on, and the solo mode is off or selects that category. Reverb runs
        when beautify is on and either space is active or AI is off.
        """
        solo = request.solo_mode
        tone_active = request.ai_enabled and request.ai_tone and solo in (AISoloMode.OFF, AISoloMode.TONE)
        space_active = request.ai_enabled and request.ai_space and solo in (AISoloMode.OFF, AISoloMode.SPACE)
        reverb_on = request.beautify and (space_active or not request.ai_enabled)
        effects = request.effects
        return cls(
            tempo=max(0.5, min(2.0, request.tempo)),
            tone_active=tone_active,
            high_pass_hz=effects.high_pass_hz if tone_active else 40.0,
            presence_gain=effects.presence_gain if tone_active else 0.0,
            drive=effects.drive if tone_active else 0.0,
            space_active=space_active,
            delay_time=60.0 / clamp_bpm(request.bpm) * DELAY_BEAT_FRACTION,
            delay_mix=effects.delay_mix if space_active else 0.0,
            reverb_mix=request.reverb_mix if reverb_on else 0.0,
        )


def peaking_eq_coefficients(
    freq: float, gain_db: float, bandwidth_octaves: float, sr: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Biquad peaking EQ (RBJ audio EQ cookbook), normalized so a[0] == 1."""
    amp = 10 ** (gain_db / 40.0)
    w0 = 2 * math.pi * freq / sr
    alpha = math.sin(w0) * math.sinh(math.log(2) / 2 * bandwidth_octaves * w0 / math.sin(w0))
    b = np.array([1 + alpha * amp, -2 * math.cos(w0), 1 - alpha * amp])
    a = np.array([1 + alpha / amp, -2 * math.cos(w0), 1 - alpha / amp])
    return b / a[0], a / a[0]


@lru_cache(maxsize=8)
def _reverb_impulse(sr: int) -> np.ndarray:
    """Exponentially decaying noise tail, unit energy. Seeded so renders repeat."""
    n = int(REVERB_SECONDS * sr)
    rng = np.random.default_rng(7)
    t = np.arange(n) / sr
    impulse = rng.standard_normal(n) * np.exp(-REVERB_DECAY * t)
    # Pre-delay so the wet signal doesn't smear the attack
    impulse[: int(0.012 * sr)] = 0.0
    return impulse / np.sqrt(np.sum(impulse ** 2))


class EffectChain:
    """Processes segment blocks through the five fixed stages."""

    def __init__(self, settings: ChainSettings, sample_rate: int):
        self.settings = settings
        self.sample_rate = sample_rate

    def process(self, block: np.ndarray, cents: float) -> np.ndarray:
        """
        Run one segment through the chain.

        Args:
            block: Source samples for the segment
            cents: Pitch shift for this segment

        Returns:
            Rendered samples, roughly ``len(block) / tempo`` plus a short tail.
            Empty if the block is empty.
        """
        if block.size == 0:
            return np.zeros(0, dtype=np.float32)

        y = self.shift(np.asarray(block, dtype=np.float32), cents)
        tail = int(RENDER_TAIL_SECONDS * self.sample_rate)
        y = np.concatenate([y, np.zeros(tail, dtype=y.dtype)]).astype(np.float64)

        s = self.settings
        if s.tone_active:
            y = self.filter(y)
            y = self.saturate(y)
        if s.space_active and s.delay_mix > 0:
            y = self.delay(y)
        if s.reverb_mix > 0:
            y = self.reverb(y)
        return y.astype(np.float32)

    def shift(self, y: np.ndarray, cents: float) -> np.ndarray:
        """Time-scale by the tempo rate and pitch-shift by ``cents``."""
        sr = self.sample_rate
        rate = self.settings.tempo
        n = y.shape[0]
        expected = max(1, int(round(n / rate)))

        # STFT-based effects need at least one full frame
        padded = np.pad(y, (0, max(0, N_FFT - n)))
        if abs(rate - 1.0) > 1e-6:
            padded = librosa.effects.time_stretch(padded, rate=rate, n_fft=N_FFT)
        if abs(cents) > 0.5:
            padded = librosa.effects.pitch_shift(padded, sr=sr, n_steps=cents / 100.0, n_fft=N_FFT)

        out = padded[:expected]
        if out.shape[0] < expected:
            out = np.pad(out, (0, expected - out.shape[0]))
        return out

    def filter(self, y: np.ndarray) -> np.ndarray:
        """High-pass, then presence boost around 3.6 kHz."""
        sr = self.sample_rate
        cutoff = min(self.settings.high_pass_hz, sr * 0.45)
        sos = butter(2, cutoff, btype="highpass", fs=sr, output="sos")
        y = sosfilt(sos, y)
        if self.settings.presence_gain != 0:
            b, a = peaking_eq_coefficients(PRESENCE_FREQ_HZ, self.settings.presence_gain, 0.8, sr)
            y = lfilter(b, a, y)
        return y

    def saturate(self, y: np.ndarray) -> np.ndarray:
        """tanh waveshaper blended in by the drive wet percentage."""
        wet = min(1.0, max(0.0, self.settings.drive / 100.0))
        if wet <= 0:
            return y
        shaped = np.tanh(DRIVE_CURVE * y) / math.tanh(DRIVE_CURVE)
        return (1 - wet) * y + wet * shaped

    def delay(self, y: np.ndarray) -> np.ndarray:
        """Feedback echo, unrolled into taps until they fall below -60 dB."""
        s = self.settings
        step = int(s.delay_time * self.sample_rate)
        if step <= 0 or step >= y.shape[0]:
            return y
        wet = np.zeros_like(y)
        gain, offset = 1.0, step
        while offset < y.shape[0] and gain > 1e-3:
            wet[offset:] += y[:-offset] * gain
            gain *= s.delay_feedback
            offset += step
        mix = s.delay_mix / 100.0
        return (1 - mix) * y + mix * wet

    def reverb(self, y: np.ndarray) -> np.ndarray:
        """Convolution with a synthetic hall tail, truncated to the input length."""
        mix = min(1.0, self.settings.reverb_mix / 100.0)
        wet = fftconvolve(y, _reverb_impulse(self.sample_rate))[: y.shape[0]]
        return (1 - mix) * y + mix * wet
