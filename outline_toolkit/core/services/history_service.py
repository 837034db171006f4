from __future__ import annotations

"""Undo/redo snapshot management for outline forests.

This service is UI-agnostic and performs pure in-memory history tracking of
the entire outline. It serializes the full forest into snapshots and hands
back freshly decoded copies on undo/redo.

Design principles
-----------------
- No UI imports and no I/O (filesystem/console).
- Snapshots are immutable blobs once stored; every restore decodes new nodes,
  so callers may mutate what they receive without touching the history.
- Linear history: recording after an undo discards everything past the
  current position (redo branches are not kept).
- Memory usage controlled by a max_history policy (trim oldest).
- Changes that come from undo/redo are tagged with :class:`ChangeOrigin` by
  the caller and are never re-recorded.

Notes
-----
Snapshots are serialised with lxml (see :func:`serialize_outline`). The codec
escapes characters XML cannot carry, so any node text round-trips exactly.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import List, NamedTuple, Optional

from outline_toolkit.core.models import OutlineNode
from outline_toolkit.core.utils import deserialize_outline, serialize_outline

__all__ = ["ChangeOrigin", "HistoryEntry", "HistoryInfo", "HistoryService"]

logger = logging.getLogger(__name__)


class ChangeOrigin(str, Enum):
    """Where a tree change came from."""

    EDIT = "edit"
    UNDO = "undo"
    REDO = "redo"
    LOAD = "load"


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable in-memory snapshot of an outline forest.

    Attributes
    ----------
    snapshot :
        Serialized forest as UTF-8 XML bytes.
    timestamp :
        Unix epoch seconds when the entry was recorded.
    """

    snapshot: bytes
    timestamp: float

    def tree(self) -> List[OutlineNode]:
        """Decode the snapshot into a new, independent forest."""
        return deserialize_outline(self.snapshot)


class HistoryInfo(NamedTuple):
    current_index: int
    total_states: int
    can_undo: bool
    can_redo: bool


class HistoryService:
    """Manage a linear undo/redo history of outline snapshots.

    The service keeps one list of entries and a cursor pointing at the entry
    that matches the current tree. Undo moves the cursor back, redo moves it
    forward, and recording truncates anything after the cursor before
    appending.

    Parameters
    ----------
    max_history : int, optional
        Maximum number of entries to keep. Oldest entries are discarded when
        the capacity is exceeded. Defaults to ``history.max_entries`` from the
        editor configuration. Values lower than 1 are coerced to 1.
    initial : list of OutlineNode, optional
        When given, recorded as the first entry.

    Examples
    --------
    >>> svc = HistoryService(max_history=10)
    >>> svc.record(tree_a)
    True
    >>> svc.record(tree_b)
    True
    >>> svc.undo() == tree_a
    True
    >>> svc.undo() is None  # already at the oldest entry
    True
    """

    def __init__(self, max_history: Optional[int] = None, initial: Optional[List[OutlineNode]] = None) -> None:
        if max_history is None:
            from outline_toolkit.config import ConfigManager

            max_history = ConfigManager().get_history_capacity()
        self._max_history: int = max(1, int(max_history))
        self._entries: List[HistoryEntry] = []
        self._index: int = -1
        if initial is not None:
            self.record(initial)

    # --------------------------------------------------------------------- API

    @property
    def max_history(self) -> int:
        return self._max_history

    def record(self, tree: List[OutlineNode], origin: ChangeOrigin = ChangeOrigin.EDIT) -> bool:
        """Capture *tree* as the newest entry.

        Entries past the current position are dropped first. If the list then
        exceeds max_history, the oldest entry is evicted and the cursor
        shifted accordingly.

        Parameters
        ----------
        tree : list of OutlineNode
            The forest to capture.
        origin : ChangeOrigin
            ``UNDO`` and ``REDO`` mean the tree was restored from this very
            history; such calls are ignored so replays never append
            themselves.

        Returns
        -------
        bool
            True when an entry was added.
        """
        if origin in (ChangeOrigin.UNDO, ChangeOrigin.REDO):
            return False

        entry = self._create_entry(tree)

        # New edits invalidate the redo tail
        if self._index < len(self._entries) - 1:
            del self._entries[self._index + 1:]
        self._entries.append(entry)
        self._index = len(self._entries) - 1

        overflow = len(self._entries) - self._max_history
        if overflow > 0:
            del self._entries[0:overflow]
            self._index -= overflow
        logger.debug("History: recorded index=%d total=%d", self._index, len(self._entries))
        return True

    def undo(self) -> Optional[List[OutlineNode]]:
        """Step back one entry and return a copy of its forest.

        Returns None when already at the oldest entry (or history is empty).
        """
        if self._index <= 0:
            return None
        self._index -= 1
        logger.debug("History: undo index=%d total=%d", self._index, len(self._entries))
        return self._entries[self._index].tree()

    def redo(self) -> Optional[List[OutlineNode]]:
        """Step forward one entry and return a copy of its forest.

        Returns None when already at the newest entry.
        """
        if self._index >= len(self._entries) - 1:
            return None
        self._index += 1
        logger.debug("History: redo index=%d total=%d", self._index, len(self._entries))
        return self._entries[self._index].tree()

    def current(self) -> Optional[List[OutlineNode]]:
        """Return a copy of the forest at the cursor, or None when empty."""
        if self._index < 0:
            return None
        return self._entries[self._index].tree()

    def can_undo(self) -> bool:
        """Return True if an undo operation is currently possible."""
        return self._index > 0

    def can_redo(self) -> bool:
        """Return True if a redo operation is currently possible."""
        return self._index < len(self._entries) - 1

    def info(self) -> HistoryInfo:
        return HistoryInfo(self._index, len(self._entries), self.can_undo(), self.can_redo())

    def entries(self) -> List[HistoryEntry]:
        """Return the stored entries, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    # --------------------------------------------------------------- Internals

    @staticmethod
    def _create_entry(tree: List[OutlineNode]) -> HistoryEntry:
        return HistoryEntry(snapshot=serialize_outline(tree), timestamp=time.time())
