"""Snapshot store - immutable captures of the studio state for A/B and export.

Snapshots live in an arena keyed by integer id; ids are never reused.
The history, the "original" and "latest" pointers and the export pin are
all ids into that arena, never object references. A snapshot that has left
the history and is not the original or latest is removed from the arena.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..core import EditableNote, QuantizeUnit, ScalePreset, SnapshotUnavailable
from ..core.constants import SNAPSHOT_HISTORY_LIMIT
from ..core.state import EffectParameters, StudioState

logger = logging.getLogger(__name__)

_TIME_FORMAT = "%m-%d %H:%M"


@dataclass(frozen=True)
class AISnapshot:
    """Point-in-time capture of the editable parameters."""

    id: int
    label: str
    notes: Tuple[EditableNote, ...]
    bpm: float
    quantize_unit: QuantizeUnit
    scale: ScalePreset
    tempo: float
    beautify: bool
    reverb_mix: float
    global_shift: int
    swing: float
    ai_enabled: bool
    ai_intensity: float
    ai_rhythm: bool
    ai_tone: bool
    ai_space: bool
    effects: EffectParameters
    created_at: datetime = field(default_factory=datetime.now, compare=False)

    @classmethod
    def capture(cls, snapshot_id: int, label: str, state: StudioState) -> "AISnapshot":
        return cls(
            id=snapshot_id,
            label=label,
            notes=tuple(n.copy() for n in state.notes),
            bpm=state.bpm,
            quantize_unit=state.quantize_unit,
            scale=state.scale,
            tempo=state.tempo,
            beautify=state.beautify,
            reverb_mix=state.reverb_mix,
            global_shift=state.global_shift,
            swing=state.swing,
            ai_enabled=state.ai_enabled,
            ai_intensity=state.ai_intensity,
            ai_rhythm=state.ai_rhythm,
            ai_tone=state.ai_tone,
            ai_space=state.ai_space,
            effects=state.effects,
        )

    def restore(self, base: StudioState) -> StudioState:
        """
        Substitute this snapshot into a copy of ``base``.

        Fields a snapshot does not capture (duration, trim, style, solo mode)
        come from ``base``.
        """
        return replace(
            base,
            notes=[n.copy() for n in self.notes],
            bpm=self.bpm,
            quantize_unit=self.quantize_unit,
            scale=self.scale,
            tempo=self.tempo,
            beautify=self.beautify,
            reverb_mix=self.reverb_mix,
            global_shift=self.global_shift,
            swing=self.swing,
            ai_enabled=self.ai_enabled,
            ai_intensity=self.ai_intensity,
            ai_rhythm=self.ai_rhythm,
            ai_tone=self.ai_tone,
            ai_space=self.ai_space,
            effects=self.effects,
        )


class SnapshotStore:
    """Capped snapshot history with original/latest/pinned pointers."""

    def __init__(self, history_limit: int = SNAPSHOT_HISTORY_LIMIT):
        self.history_limit = history_limit
        self._arena: Dict[int, AISnapshot] = {}
        self._next_id = 0
        self._history: List[int] = []  # newest first
        self.original_id: Optional[int] = None
        self.latest_id: Optional[int] = None
        self.pinned_id: Optional[int] = None
        self.showing_original = False

    @property
    def history(self) -> List[AISnapshot]:
        """Kept snapshots, newest first."""
        return [self._arena[i] for i in self._history]

    def __len__(self) -> int:
        return len(self._history)

    @property
    def retained(self) -> int:
        """Snapshots held in memory: history plus the original/latest targets."""
        return len(self._arena)

    def capture(self, state: StudioState, label: str) -> AISnapshot:
        """Add a snapshot to the arena without touching history or pointers."""
        snapshot = AISnapshot.capture(self._next_id, label, state)
        self._next_id += 1
        self._arena[snapshot.id] = snapshot
        return snapshot

    def _append(self, snapshot: AISnapshot) -> None:
        self._history.insert(0, snapshot.id)
        if len(self._history) > self.history_limit:
            dropped = self._history[self.history_limit:]
            del self._history[self.history_limit:]
            logger.debug("Snapshot history full, dropped ids %s", dropped)

    def _collect(self) -> None:
        """Forget snapshots nothing refers to any more."""
        keep = set(self._history)
        keep.update(i for i in (self.original_id, self.latest_id) if i is not None)
        for snapshot_id in [i for i in self._arena if i not in keep]:
            del self._arena[snapshot_id]

    def record_optimization(self, before: StudioState, after: StudioState) -> AISnapshot:
        """
        Log an optimisation run.

        The pre-optimisation state becomes the "original" the first time only;
        the optimised state is appended to history and becomes "latest".
        """
        if self.original_id is None:
            self.original_id = self.capture(before, "Original").id
        stamp = datetime.now().strftime(_TIME_FORMAT)
        snapshot = self.capture(after, f"AI optimized {stamp}")
        self._append(snapshot)
        self.latest_id = snapshot.id
        self.showing_original = False
        self._collect()
        return snapshot

    def save(self, state: StudioState, label: Optional[str] = None) -> AISnapshot:
        """Manually save the current state; a blank label gets a timestamp."""
        label = (label or "").strip()
        if not label:
            label = f"Snapshot {datetime.now().strftime(_TIME_FORMAT)}"
        snapshot = self.capture(state, label)
        self._append(snapshot)
        self._collect()
        return snapshot

    def get(self, snapshot_id: int) -> AISnapshot:
        """
        Resolve an id that is still in history or held by a pointer.

        Raises:
            SnapshotUnavailable: If the id was never issued or has been dropped
        """
        live = snapshot_id in self._history or snapshot_id in (self.original_id, self.latest_id)
        if not live or snapshot_id not in self._arena:
            raise SnapshotUnavailable(f"No snapshot with id {snapshot_id}")
        return self._arena[snapshot_id]

    @property
    def original(self) -> Optional[AISnapshot]:
        return None if self.original_id is None else self._arena[self.original_id]

    @property
    def latest(self) -> Optional[AISnapshot]:
        return None if self.latest_id is None else self._arena[self.latest_id]

    def toggle_ab(self, state: StudioState) -> StudioState:
        """
        Swap between the original and the latest optimised version.

        Raises:
            SnapshotUnavailable: Before the first optimisation
        """
        if self.original_id is None or self.latest_id is None:
            raise SnapshotUnavailable("Run an optimisation before A/B comparing")

        if self.showing_original:
            self.showing_original = False
            return self.latest.restore(state)
        self.showing_original = True
        return self.original.restore(state)

    def apply(self, snapshot_id: int, state: StudioState) -> StudioState:
        """Restore a snapshot and make it the latest version."""
        snapshot = self.get(snapshot_id)
        self.latest_id = snapshot.id
        self.showing_original = False
        self._collect()
        return snapshot.restore(state)

    def toggle_pin(self, snapshot_id: int) -> Optional[int]:
        """Pin a snapshot for export, or unpin it if already pinned."""
        if self.pinned_id == snapshot_id:
            self.pinned_id = None
        else:
            self.pinned_id = self.get(snapshot_id).id
        return self.pinned_id

    def pinned(self) -> Optional[AISnapshot]:
        """The pinned snapshot, if set and still in history."""
        if self.pinned_id is None or self.pinned_id not in self._history:
            return None
        return self._arena[self.pinned_id]

    def clear(self) -> None:
        self._arena = {}
        self._next_id = 0
        self._history = []
        self.original_id = None
        self.latest_id = None
        self.pinned_id = None
        self.showing_original = False
