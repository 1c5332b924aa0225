"""Note segmentation - group a pitch track into note events."""

from typing import List

import numpy as np

from ..core import EditableNote


class NoteSegmenter:
    """Turns maximal runs of voiced frames into notes.

    A run shorter than ``min_frames`` is treated as noise. Each note's pitch
    is the median MIDI value of its run, which keeps stray octave errors from
    dragging the pitch the way a mean would.
    """

    def __init__(self, min_frames: int = 3):
        self.min_frames = min_frames

    def segment(self, track: np.ndarray, hop_duration: float) -> List[EditableNote]:
        """
        Segment a pitch track.

        Args:
            track: f0 per hop in Hz (0 = unvoiced)
            hop_duration: Seconds between frames

        Returns:
            Time-ordered, non-overlapping notes
        """
        track = np.asarray(track, dtype=np.float64)
        if track.size == 0 or hop_duration <= 0:
            return []

        notes = []
        for start, end in self._voiced_runs(track):
            if end - start < self.min_frames:
                continue
            midi = np.sort(69 + 12 * np.log2(track[start:end] / 440.0))
            notes.append(
                EditableNote(
                    start_time=start * hop_duration,
                    end_time=end * hop_duration,
                    detected_midi=float(midi[midi.shape[0] // 2]),
                )
            )
        return notes

    @staticmethod
    def _voiced_runs(track: np.ndarray):
        """Yield (start, end) frame ranges of consecutive voiced frames."""
        voiced = np.concatenate(([False], track > 0, [False]))
        edges = np.flatnonzero(voiced[1:] != voiced[:-1])
        for start, end in zip(edges[::2], edges[1::2]):
            yield int(start), int(end)
