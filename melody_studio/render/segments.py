"""Render segments - split the trim window into constant-shift spans."""

import math
from dataclasses import replace
from typing import List, Sequence

import numpy as np

from ..core import EditableNote, RenderSegment
from ..core.constants import MIN_SEGMENT_DURATION


def beautify_correction_cents(pitch_track: np.ndarray) -> float:
    """
    Cents that move the recording's median pitch onto the nearest semitone.

    Returns 0 when the track has no voiced frames.
    """
    track = np.asarray(pitch_track, dtype=np.float64)
    voiced = np.sort(track[track > 0])
    if voiced.size == 0:
        return 0.0
    median_hz = voiced[voiced.size // 2]
    midi = 69 + 12 * math.log2(median_hz / 440.0)
    return float((math.floor(midi + 0.5) - midi) * 100)


def build_render_segments(
    notes: Sequence[EditableNote],
    trim_start: float,
    trim_end: float,
    duration: float,
    base_cents: float = 0.0,
    global_shift: int = 0,
) -> List[RenderSegment]:
    """
    Tile the trim window with render segments.

    Each note overlapping the window gets ``base + (offset + shift) * 100``
    cents; gaps between notes get ``base``. With no overlapping notes the
    whole window is one segment at ``base + shift * 100``. Pieces shorter
    than MIN_SEGMENT_DURATION are folded into a neighbour, so the result
    always covers [start, end] exactly.

    Args:
        notes: Edited notes
        trim_start: Window start in seconds (clamped into the recording)
        trim_end: Window end in seconds (clamped into the recording)
        duration: Recording length in seconds
        base_cents: Constant correction applied everywhere
        global_shift: Style transposition in semitones

    Returns:
        Segments sorted by start; empty when the window has zero width
    """
    start = max(0.0, min(trim_start, duration))
    end = max(start, min(trim_end, duration))
    if end <= start:
        return []

    spans = []
    for note in sorted(notes, key=lambda n: n.start_time):
        s = max(start, note.start_time)
        e = min(end, note.end_time)
        if e > s:
            spans.append((s, e, base_cents + (note.semitone_offset + global_shift) * 100))

    if not spans:
        return [RenderSegment(start, end, base_cents + global_shift * 100)]

    pieces: List[RenderSegment] = []
    cursor = start
    for s, e, cents in spans:
        s = max(s, cursor)
        if e <= s:
            continue
        if s > cursor:
            pieces.append(RenderSegment(cursor, s, base_cents))
        pieces.append(RenderSegment(s, e, cents))
        cursor = e
    if cursor < end:
        pieces.append(RenderSegment(cursor, end, base_cents))

    return _merge_short(pieces, start, end)


def _merge_short(pieces: List[RenderSegment], start: float, end: float) -> List[RenderSegment]:
    merged: List[RenderSegment] = []
    carry = None
    for piece in pieces:
        if piece.duration < MIN_SEGMENT_DURATION:
            if merged:
                merged[-1] = replace(merged[-1], end=piece.end)
            elif carry is None:
                carry = piece.start
            continue
        if carry is not None:
            piece = replace(piece, start=carry)
            carry = None
        merged.append(piece)

    if not merged:
        return [RenderSegment(start, end, pieces[0].cents)]
    return merged


def effective_average_shift_cents(
    notes: Sequence[EditableNote], base_cents: float = 0.0, global_shift: int = 0
) -> float:
    """Duration-weighted mean of the manual offsets, plus base and global shift."""
    valid = [n for n in notes if n.duration > 0]
    total = sum(n.duration for n in valid)
    manual = 0.0
    if total > 0:
        manual = sum(n.semitone_offset * 100 * n.duration for n in valid) / total
    return base_cents + manual + global_shift * 100
