"""Tests for the snapshot store: A/B comparison, history cap and pinning."""

import pytest

from melody_studio.core import SnapshotUnavailable
from melody_studio.core.state import StudioState
from melody_studio.style import SnapshotStore, optimize


@pytest.fixture
def state(notes):
    return StudioState(notes=notes, duration=1.5, trim_end=1.5)


class TestSnapshotStore:

    def test_record_optimization(self, state):
        store = SnapshotStore()
        optimized = optimize(state, 0.7)
        snapshot = store.record_optimization(state, optimized)

        assert store.original.label == "Original"
        assert store.latest is snapshot
        assert snapshot.label.startswith("AI optimized ")
        assert len(store) == 1

    def test_original_is_captured_once(self, state):
        store = SnapshotStore()
        first = optimize(state, 0.3)
        store.record_optimization(state, first)
        store.record_optimization(first, optimize(first, 0.9))

        assert store.original.restore(state) == state
        assert len(store) == 2

    def test_toggle_ab_twice_restores(self, state):
        store = SnapshotStore()
        optimized = optimize(state, 0.7)
        store.record_optimization(state, optimized)

        a = store.toggle_ab(optimized)
        assert store.showing_original
        assert a == state

        b = store.toggle_ab(a)
        assert not store.showing_original
        assert b == optimized

    def test_toggle_ab_needs_optimization(self, state):
        with pytest.raises(SnapshotUnavailable):
            SnapshotStore().toggle_ab(state)

    def test_restore_keeps_uncaptured_fields(self, state):
        store = SnapshotStore()
        snapshot = store.save(state, "mine")
        base = state.copy()
        base.trim_start = 0.4
        base.style_id = "lofi_chill"

        restored = snapshot.restore(base)
        assert restored.trim_start == 0.4
        assert restored.style_id == "lofi_chill"
        assert restored.notes == state.notes
        assert restored.notes[0] is not snapshot.notes[0]

    def test_snapshot_is_independent_of_later_edits(self, state):
        store = SnapshotStore()
        snapshot = store.save(state)
        state.notes[0].semitone_offset = 12

        assert snapshot.notes[0].semitone_offset == 0

    def test_manual_labels(self, state):
        store = SnapshotStore()
        assert store.save(state, "  chorus take  ").label == "chorus take"
        assert store.save(state, "").label.startswith("Snapshot ")

    def test_history_is_capped(self, state):
        store = SnapshotStore()
        saved = [store.save(state, f"take {i}") for i in range(25)]

        assert len(store) == 20
        assert store.history[0].label == "take 24"
        assert store.history[-1].label == "take 5"
        with pytest.raises(SnapshotUnavailable):
            store.get(saved[0].id)
        assert store.get(saved[10].id) is saved[10]

    def test_apply_sets_latest(self, state):
        store = SnapshotStore()
        snapshot = store.save(optimize(state, 0.5), "half")
        restored = store.apply(snapshot.id, state)

        assert store.latest_id == snapshot.id
        assert restored.ai_enabled

    def test_unknown_id(self, state):
        with pytest.raises(SnapshotUnavailable):
            SnapshotStore().apply(3, state)

    def test_pin_toggle(self, state):
        store = SnapshotStore()
        snapshot = store.save(state, "pinned")

        assert store.toggle_pin(snapshot.id) == snapshot.id
        assert store.pinned() is snapshot
        assert store.toggle_pin(snapshot.id) is None
        assert store.pinned() is None

    def test_pin_lost_when_dropped_from_history(self, state):
        store = SnapshotStore(history_limit=3)
        first = store.save(state, "first")
        store.toggle_pin(first.id)
        for i in range(3):
            store.save(state, f"later {i}")

        assert store.pinned() is None

    def test_clear(self, state):
        store = SnapshotStore()
        store.record_optimization(state, optimize(state))
        store.clear()

        assert len(store) == 0
        assert store.original is None
        assert store.latest is None
        assert store.pinned_id is None

    def test_dropped_snapshots_are_released(self, state):
        store = SnapshotStore()
        for _ in range(200):
            store.record_optimization(state, optimize(state, 0.4))

        assert len(store) == 20
        # History plus the original, which has never been in history
        assert store.retained == 21
        assert store.original.label == "Original"

    def test_applied_snapshot_outlives_history(self, state):
        store = SnapshotStore(history_limit=2)
        first = store.save(state, "first")
        store.apply(first.id, state)
        store.save(state, "second")
        store.save(state, "third")

        assert store.get(first.id) is first
        assert store.retained == 3

        store.save(state, "fourth")
        store.apply(store.history[0].id, state)
        with pytest.raises(SnapshotUnavailable):
            store.get(first.id)
        assert store.retained == 2
