"""Render layer - Segment building and offline mix rendering."""

from .segments import (
    beautify_correction_cents,
    build_render_segments,
    effective_average_shift_cents,
)
from .effects import ChainSettings, EffectChain
from .renderer import ExportRequest, SegmentRenderer

__all__ = [
    "beautify_correction_cents",
    "build_render_segments",
    "effective_average_shift_cents",
    "ChainSettings",
    "EffectChain",
    "ExportRequest",
    "SegmentRenderer",
]
