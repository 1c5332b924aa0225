"""Analysis layer - Low-level signal analysis.

This layer extracts frame-level information from raw audio:
- Pitch tracking (autocorrelation f0 per hop)
- Waveform envelope for display
"""

from .pitch import PitchTracker, hz_to_midi
from .waveform import waveform_envelope

__all__ = [
    "PitchTracker",
    "hz_to_midi",
    "waveform_envelope",
]
