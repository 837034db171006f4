from __future__ import annotations

"""Edit session coordinating the editing service, history and listeners.

The session owns the single current forest. Every dispatched operation runs
through :class:`StructureEditingService`; when the resulting forest differs
from the current one (deep equality), the session stores it, records a
history entry and notifies listeners with a focus hint.
"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from outline_toolkit.core.models import Operation, OutlineNode, normalize_outline
from outline_toolkit.core.services.history_service import ChangeOrigin, HistoryService
from outline_toolkit.core.services.structure_editing_service import EditResult, StructureEditingService

__all__ = ["ChangeEvent", "EditSession"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """Notification sent to listeners after the current forest changed.

    Attributes
    ----------
    tree
        The new current forest.
    focus_id
        Advisory focus hint; always None for undo/redo and loads.
    origin
        Whether the change came from an edit, an undo, a redo or a load.
    """
    tree: List[OutlineNode]
    focus_id: Optional[str]
    origin: ChangeOrigin


Listener = Callable[[ChangeEvent], Any]


class EditSession:
    """Coordinates outline edits, undo/redo and change notification.

    Parameters
    ----------
    data : iterable of mappings or OutlineNode, optional
        Initial outline; normalised with :func:`normalize_outline`.
    editing_service : StructureEditingService, optional
        Service that performs structural edits.
    history : HistoryService, optional
        Service that stores undo/redo snapshots. It should be empty; the
        initial forest is recorded as its first entry.

    Notes
    -----
    - Dispatch is synchronous; operations apply in the order they arrive.
    - Operations that leave the forest unchanged neither record history nor
      notify listeners.
    """

    def __init__(
        self,
        data: Optional[Iterable[Union[Mapping[str, Any], OutlineNode]]] = None,
        *,
        editing_service: Optional[StructureEditingService] = None,
        history: Optional[HistoryService] = None,
    ) -> None:
        self.editing_service: StructureEditingService = editing_service or StructureEditingService()
        self.history: HistoryService = history if history is not None else HistoryService()
        self._listeners: List[Listener] = []
        self._tree: List[OutlineNode] = normalize_outline(data or [])
        self.history.record(self._tree, ChangeOrigin.LOAD)

    # ---------------------------------------------------------------------------------
    # State
    # ---------------------------------------------------------------------------------

    @property
    def tree(self) -> List[OutlineNode]:
        """Current forest. Treat as read-only; edit through :meth:`dispatch`."""
        return self._tree

    def to_data(self) -> List[Dict[str, Any]]:
        """Return the current forest as plain nested dicts."""
        return [node.to_dict() for node in self._tree]

    def load(self, data: Iterable[Union[Mapping[str, Any], OutlineNode]]) -> None:
        """Replace the current forest and restart history from it."""
        tree = normalize_outline(data)
        self.history.clear()
        self.history.record(tree, ChangeOrigin.LOAD)
        self._tree = tree
        logger.info("Session: loaded outline roots=%d", len(tree))
        self._notify(ChangeEvent(tree, None, ChangeOrigin.LOAD))

    # ---------------------------------------------------------------------------------
    # Commands
    # ---------------------------------------------------------------------------------

    def dispatch(self, operation: Union[Operation, Mapping[str, Any]]) -> EditResult:
        """Apply one operation to the current forest.

        Mappings are decoded with :meth:`Operation.from_dict` first, which
        raises :class:`InvalidOperationError` for unknown kinds.
        """
        if not isinstance(operation, Operation):
            operation = Operation.from_dict(operation)

        result = self.editing_service.apply(self._tree, operation)
        if not result.changed or result.tree == self._tree:
            return result

        self._commit(result.tree, result.focus_id, ChangeOrigin.EDIT)
        return result

    def undo(self) -> Optional[List[OutlineNode]]:
        """Restore the previous forest; None when there is nothing to undo."""
        tree = self.history.undo()
        if tree is None:
            return None
        self._commit(tree, None, ChangeOrigin.UNDO)
        return tree

    def redo(self) -> Optional[List[OutlineNode]]:
        """Re-apply the next forest; None when there is nothing to redo."""
        tree = self.history.redo()
        if tree is None:
            return None
        self._commit(tree, None, ChangeOrigin.REDO)
        return tree

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ---------------------------------------------------------------------------------
    # Listeners
    # ---------------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for change events; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---------------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------------

    def _commit(self, tree: List[OutlineNode], focus_id: Optional[str], origin: ChangeOrigin) -> None:
        changed = tree != self._tree
        self._tree = tree
        # UNDO/REDO origins are ignored by the history itself
        self.history.record(tree, origin)
        logger.debug("Session: commit origin=%s focus=%s changed=%s", origin.value, focus_id, changed)
        if changed:
            self._notify(ChangeEvent(tree, focus_id, origin))

    def _notify(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.error("Session: listener %r failed", listener, exc_info=True)
