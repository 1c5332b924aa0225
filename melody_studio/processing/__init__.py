"""Processing layer - Note-level post-processing.

This layer refines detected notes:
- Time quantization (snap to a BPM grid)
- Pitch quantization (snap to a scale)
"""

from .quantize import ScaleQuantizer, clamp_bpm, grid_duration, snap_midi_to_scale

__all__ = [
    "ScaleQuantizer",
    "clamp_bpm",
    "grid_duration",
    "snap_midi_to_scale",
]
