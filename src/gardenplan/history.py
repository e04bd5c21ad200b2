"""
Undo/redo history for placement edits.

History is a log of changes rather than of full copies: each entry holds the
placements a mutation replaced and the ones it introduced, which is enough to
apply the mutation in either direction. The log is bounded; once it reaches
``max_depth`` the oldest entries are dropped.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Deque, Optional, Sequence, Tuple

from .errors import EmptyHistoryError
from .models import HistorySnapshot

if TYPE_CHECKING:
    from .store import PlacementStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 100

PLANTS = "plants"
STRUCTURES = "structures"
PATHS = "paths"
COLLECTIONS = (PLANTS, STRUCTURES, PATHS)


@dataclass(frozen=True)
class Change:
    """
    One edit to one placement collection.

    Attributes:
        collection: "plants", "structures" or "paths".
        index: Position of the placement within its collection.
        before: Placement present before the edit (None for additions).
        after: Placement present after the edit (None for removals).
    """

    collection: str
    index: int
    before: Optional[Any] = None
    after: Optional[Any] = None

    def inverse(self) -> "Change":
        return Change(self.collection, self.index, before=self.after, after=self.before)


# A single user action; most are one change, clearing the plan is many
HistoryEntry = Tuple[Change, ...]


class HistoryManager:
    """
    Bounded undo/redo stacks of change entries.

    Args:
        max_depth: Maximum number of undoable actions kept. ``None`` keeps
            everything.
    """

    def __init__(self, max_depth: Optional[int] = DEFAULT_MAX_HISTORY):
        if max_depth is not None and max_depth < 1:
            raise ValueError("max_depth must be at least 1 or None")
        self.max_depth = max_depth
        self._undo: Deque[HistoryEntry] = deque(maxlen=max_depth)
        self._redo: Deque[HistoryEntry] = deque(maxlen=max_depth)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def record(self, changes: Sequence[Change]) -> None:
        """
        Record an accepted mutation just before the store applies it.

        Any redo history is discarded: a new edit starts a new branch.
        """
        if len(self._undo) == self._undo.maxlen:
            logger.debug("History full, evicting oldest entry")
        self._undo.append(tuple(changes))
        self._redo.clear()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def undo(self, store: "PlacementStore") -> Optional[HistorySnapshot]:
        """
        Revert the most recent action.

        Returns:
            Snapshot of the restored state, or None if there was nothing to undo.
        """
        try:
            entry = self._pop(self._undo)
        except EmptyHistoryError:
            logger.debug("Nothing to undo")
            return None
        store.apply_changes(tuple(change.inverse() for change in reversed(entry)))
        self._redo.append(entry)
        return store.snapshot()

    def redo(self, store: "PlacementStore") -> Optional[HistorySnapshot]:
        """
        Reapply the most recently undone action.

        Returns:
            Snapshot of the restored state, or None if there was nothing to redo.
        """
        try:
            entry = self._pop(self._redo)
        except EmptyHistoryError:
            logger.debug("Nothing to redo")
            return None
        store.apply_changes(entry)
        self._undo.append(entry)
        return store.snapshot()

    @staticmethod
    def _pop(stack: Deque[HistoryEntry]) -> HistoryEntry:
        if not stack:
            raise EmptyHistoryError("history stack is empty")
        return stack.pop()
