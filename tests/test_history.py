from __future__ import annotations

from photo_session.edit_state import EditState
from photo_session.history import HistoryEngine
from photo_session.image_engine.decoder import WorkingImage

IMG_A = WorkingImage(b"a", 1, 1, "png")
IMG_B = WorkingImage(b"bb", 2, 1, "png")


def test_empty_stacks_are_noops() -> None:
    h = HistoryEngine()
    assert h.undo(EditState(), IMG_A) is None
    assert h.redo(EditState(), IMG_A) is None
    assert h.undo_depth == 0
    assert h.redo_depth == 0


def test_snapshot_copies_state() -> None:
    h = HistoryEngine()
    s = EditState()
    h.record_snapshot(s, IMG_A)
    s.brightness = 150

    entry = h.undo(s, IMG_A)
    assert entry is not None
    assert entry.state.brightness == 100


def test_undo_redo_moves_entries() -> None:
    h = HistoryEngine()
    before = EditState()
    h.record_snapshot(before, IMG_A)
    current = EditState(contrast=80)

    entry = h.undo(current, IMG_B)
    assert entry is not None
    assert entry.state == before
    assert entry.image == IMG_A
    assert (h.undo_depth, h.redo_depth) == (0, 1)

    back = h.redo(entry.state, entry.image)
    assert back is not None
    assert back.state == current
    assert back.image == IMG_B
    assert (h.undo_depth, h.redo_depth) == (1, 0)


def test_new_snapshot_clears_redo() -> None:
    h = HistoryEngine()
    h.record_snapshot(EditState(), IMG_A)
    h.undo(EditState(brightness=120), IMG_A)
    assert h.can_redo

    h.record_snapshot(EditState(), IMG_A)
    assert not h.can_redo
    assert h.redo(EditState(), IMG_A) is None


def test_limit_drops_oldest() -> None:
    h = HistoryEngine(limit=2)
    for i in range(4):
        h.record_snapshot(EditState(brightness=i), IMG_A)
    assert h.undo_depth == 2

    first = h.undo(EditState(), IMG_A)
    second = h.undo(first.state, IMG_A)
    assert first.state.brightness == 3
    assert second.state.brightness == 2
    assert h.undo(second.state, IMG_A) is None


def test_returned_entries_do_not_alias_stack() -> None:
    h = HistoryEngine()
    h.record_snapshot(EditState(), IMG_A)
    entry = h.undo(EditState(saturate=10), IMG_A)
    entry.state.saturate = 999

    redone = h.redo(entry.state, IMG_A)
    again = h.undo(redone.state, IMG_A)
    assert again.state.saturate == 999
    assert redone.state.saturate == 10


def test_clear() -> None:
    h = HistoryEngine()
    h.record_snapshot(EditState(), IMG_A)
    h.record_snapshot(EditState(), IMG_A)
    h.undo(EditState(), IMG_A)
    h.clear()
    assert (h.undo_depth, h.redo_depth) == (0, 0)
