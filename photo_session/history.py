"""Undo/redo history over (edit state, working image) pairs.

Each entry holds a private copy of the state and a reference to the
immutable image bytes current at the same moment. Entries move between the
two stacks; a fresh snapshot always invalidates the redo stack.
"""

from __future__ import annotations

from dataclasses import dataclass

from .edit_state import EditState
from .image_engine.decoder import WorkingImage
from .logger import get_logger

_logger = get_logger("history")


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    state: EditState
    image: WorkingImage | None


class HistoryEngine:
    def __init__(self, limit: int = 0) -> None:
        # 0 means unbounded
        self.limit = max(0, int(limit))
        self._undo: list[HistoryEntry] = []
        self._redo: list[HistoryEntry] = []

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def record_snapshot(self, state: EditState, image: WorkingImage | None) -> None:
        self._undo.append(HistoryEntry(state.copy(), image))
        self._redo.clear()
        if self.limit and len(self._undo) > self.limit:
            dropped = len(self._undo) - self.limit
            del self._undo[:dropped]
            _logger.debug("history limit %d reached, dropped %d oldest entries", self.limit, dropped)

    def undo(self, state: EditState, image: WorkingImage | None) -> HistoryEntry | None:
        """Swap the current pair for the newest undo entry.

        Returns the entry to make current, or None when there is nothing to undo.
        """
        if not self._undo:
            return None
        self._redo.append(HistoryEntry(state.copy(), image))
        entry = self._undo.pop()
        return HistoryEntry(entry.state.copy(), entry.image)

    def redo(self, state: EditState, image: WorkingImage | None) -> HistoryEntry | None:
        if not self._redo:
            return None
        self._undo.append(HistoryEntry(state.copy(), image))
        entry = self._redo.pop()
        return HistoryEntry(entry.state.copy(), entry.image)

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
