"""Style transforms - presets, note patterns and swing.

Every function here takes plain values (or a StudioState) and returns new
objects; inputs are left untouched so jobs can run on copies.
"""

import logging
from typing import List, Optional, Sequence

from .profiles import StyleProfile, get_style
from ..core import EditableNote, QuantizeUnit
from ..core.constants import DEFAULT_REVERB_MIX, SWING_MIN_GAP
from ..core.state import StudioState
from ..processing import ScaleQuantizer, grid_duration

logger = logging.getLogger(__name__)


def _clip_duration(state: StudioState) -> Optional[float]:
    return state.duration if state.duration > 0 else None


def quantize_state(state: StudioState) -> StudioState:
    """Time + pitch snap the state's notes with its own bpm, grid and scale."""
    new = state.copy()
    if not new.notes:
        return new
    quantizer = ScaleQuantizer(bpm=new.bpm, quantize_unit=new.quantize_unit, scale=new.scale)
    new.notes = quantizer.quantize(new.notes, _clip_duration(new))
    return new


def apply_pattern_offsets(notes: Sequence[EditableNote], pattern: Sequence[int]) -> List[EditableNote]:
    """Add ``pattern[i % len(pattern)]`` semitones to note i (clamped to +/-24)."""
    if not notes or not pattern:
        return [n.copy() for n in notes]
    return [
        note.with_offset(note.semitone_offset + pattern[idx % len(pattern)])
        for idx, note in enumerate(notes)
    ]


def apply_swing(
    notes: Sequence[EditableNote],
    bpm: float,
    quantize_unit: QuantizeUnit,
    swing: float,
    clip_duration: Optional[float] = None,
) -> List[EditableNote]:
    """
    Delay every second note by ``grid * swing`` seconds.

    Overlaps created by the shift are resolved in order by pushing the later
    note forward by the overlap, keeping it at least SWING_MIN_GAP long.

    Args:
        notes: Notes to swing (not modified)
        bpm: Tempo in BPM
        quantize_unit: Grid the swing amount is relative to
        swing: Fraction of a grid cell to delay off-beat notes by
        clip_duration: Times are clamped to this when given

    Returns:
        New time-ordered notes
    """
    ordered = [n.copy() for n in sorted(notes, key=lambda n: n.start_time)]
    if len(ordered) < 2 or swing <= 0:
        return ordered

    limit = float("inf") if clip_duration is None else clip_duration
    push = grid_duration(bpm, quantize_unit) * swing

    for idx in range(1, len(ordered), 2):
        note = ordered[idx]
        note.start_time = min(limit, note.start_time + push)
        note.end_time = min(limit, note.end_time + push)

    for idx in range(1, len(ordered)):
        prev, note = ordered[idx - 1], ordered[idx]
        if note.start_time < prev.end_time:
            overlap = prev.end_time - note.start_time
            note.start_time += overlap
            note.end_time = max(note.start_time + SWING_MIN_GAP, note.end_time + overlap)
            note.end_time = min(limit, note.end_time)

    # Notes squeezed past the clip end have nowhere left to go
    result = [n for n in ordered if n.end_time > n.start_time]
    if len(result) < len(ordered):
        logger.debug("Swing dropped %d notes at the clip end", len(ordered) - len(result))
    return result


def swing_state(state: StudioState) -> StudioState:
    new = state.copy()
    new.notes = apply_swing(new.notes, new.bpm, new.quantize_unit, new.swing, _clip_duration(new))
    return new


def apply_style(state: StudioState, style_id: str) -> StudioState:
    """
    Apply a style preset.

    Sets bpm (range midpoint), grid, scale, tempo, reverb, global shift and
    swing from the profile. When notes exist they are re-quantized, the
    profile's note pattern is added, and swing is applied.
    """
    style: StyleProfile = get_style(style_id)
    new = state.copy()
    new.style_id = style.id
    new.bpm = style.default_bpm
    new.quantize_unit = style.quantize_unit
    new.scale = style.scale
    new.tempo = style.tempo_rate
    new.beautify = style.beautify_by_default
    new.reverb_mix = style.reverb_mix
    new.global_shift = style.global_semitone_shift
    new.swing = style.swing_amount

    if new.notes:
        new = quantize_state(new)
        new.notes = apply_pattern_offsets(new.notes, style.note_pattern)
        new = swing_state(new)

    logger.info("Applied style %s (%d notes)", style.name, len(new.notes))
    return new


def clear_note_offsets(state: StudioState) -> StudioState:
    """Zero all note offsets and reset the style transforms."""
    new = state.copy()
    new.notes = [n.with_offset(0) for n in new.notes]
    new.global_shift = 0
    new.swing = 0.0
    new.reverb_mix = DEFAULT_REVERB_MIX
    return new
