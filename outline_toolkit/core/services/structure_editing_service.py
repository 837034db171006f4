from __future__ import annotations

"""Service layer for structural edits on an in-memory outline forest.

This module provides a UI-agnostic, testable service that encapsulates the
positional edit operations of an outliner: inserting siblings, indenting,
outdenting, reordering and drag-and-drop reparenting.

Scope and guarantees:
- Operates purely in-memory on lists of OutlineNode; no file I/O nor UI imports.
- Never mutates its input. Every method copies the nodes along the edited
  path and returns a new forest; untouched subtrees are shared read-only.
- Stale references (ids no longer in the tree) are silent no-ops: the input
  forest is returned as-is with ``changed=False`` and nothing is logged.
- Never raises for a well-typed call; rejected edits are reported through
  EditResult.

Examples
--------
Basic usage:

    service = StructureEditingService()
    result = service.indent(tree, "c", parent_id="a")
    if result.changed:
        tree = result.tree

"""

from dataclasses import dataclass, replace
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from outline_toolkit.core.models import DropPosition, Operation, OperationKind, OutlineNode
from outline_toolkit.core.node_store import collect_ids, index_path, node_at, visible_order
from outline_toolkit.core.services.reparent_validator import can_move_into
from outline_toolkit.core.utils import generate_node_id


__all__ = ["EditResult", "StructureEditingService"]

logger = logging.getLogger(__name__)

Outline = List[OutlineNode]


@dataclass(frozen=True)
class EditResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    tree
        The resulting forest. When ``changed`` is False this is the very
        list object that was passed in.
    changed
        Whether the operation produced a different forest.
    message
        Human-readable summary suitable for logs or UI display.
    focus_id
        Advisory hint naming the node the view should focus next.
    details
        Optional structured details for diagnostics or caller logic.
    """
    tree: Outline
    changed: bool
    message: str
    focus_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class StructureEditingService:
    """Encapsulates structural edit operations on an outline forest.

    Every public method takes the current forest as its first argument and
    returns an :class:`EditResult`; the service keeps no state between calls
    besides its id factory.

    Parameters
    ----------
    id_factory
        Callable producing ids for nodes created by the add operations.
        Defaults to :func:`outline_toolkit.core.utils.generate_node_id`.
        A generated id that already exists in the forest is discarded and
        a new one requested.

    Notes
    -----
    ``parent_id`` arguments carry the caller's view of where the target
    lives. When given, it must match the target's actual parent, otherwise
    the call is treated as a stale reference.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._id_factory: Callable[[], str] = id_factory or generate_node_id

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def apply(self, tree: Outline, operation: Operation) -> EditResult:
        """Dispatch *operation* to the matching edit method."""
        kind = operation.kind
        if kind is OperationKind.ADD_SIBLING:
            return self.add_sibling(tree, operation.target_id, operation.parent_id, new_id=operation.new_id)
        if kind is OperationKind.ADD_SIBLING_BEFORE:
            return self.add_sibling_before(tree, operation.target_id, operation.parent_id, new_id=operation.new_id)
        if kind is OperationKind.ADD_CHILD:
            return self.add_child(tree, operation.target_id, new_id=operation.new_id)
        if kind is OperationKind.INDENT:
            return self.indent(tree, operation.target_id, operation.parent_id, operation.new_text)
        if kind is OperationKind.OUTDENT:
            return self.outdent(tree, operation.target_id, operation.parent_id, operation.new_text)
        if kind is OperationKind.MOVE_UP:
            return self.move_up(tree, operation.target_id, operation.parent_id)
        if kind is OperationKind.MOVE_DOWN:
            return self.move_down(tree, operation.target_id, operation.parent_id)
        if kind is OperationKind.MOVE_TO:
            return self.move_to(tree, operation.dragged_id, operation.anchor_id, operation.drop_position)
        if kind is OperationKind.UPDATE:
            updates = dict(operation.updates or {})
            text = updates.get("text", operation.new_text)
            return self.update_node(tree, operation.target_id, text=text, expanded=updates.get("expanded"))
        if kind is OperationKind.DELETE:
            return self.delete_node(tree, operation.target_id, operation.parent_id)
        if kind is OperationKind.TOGGLE_EXPANDED:
            return self.toggle_expanded(tree, operation.target_id)
        return self._noop(tree, f"Unsupported operation kind '{kind}'.")

    def add_sibling(
        self,
        tree: Outline,
        target_id: str,
        parent_id: Optional[str] = None,
        *,
        new_id: Optional[str] = None,
    ) -> EditResult:
        """Insert an empty node immediately after *target_id*, at the same level."""
        return self._insert_sibling(tree, target_id, parent_id, new_id, offset=1, label="add_sibling")

    def add_sibling_before(
        self,
        tree: Outline,
        target_id: str,
        parent_id: Optional[str] = None,
        *,
        new_id: Optional[str] = None,
    ) -> EditResult:
        """Insert an empty node immediately before *target_id*, at the same level."""
        return self._insert_sibling(tree, target_id, parent_id, new_id, offset=0, label="add_sibling_before")

    def add_child(self, tree: Outline, target_id: str, *, new_id: Optional[str] = None) -> EditResult:
        """Append an empty node as the last child of *target_id*.

        A collapsed target is expanded so that the new node is visible.
        """
        path = self._locate(tree, target_id, None, check_parent=False)
        if path is None:
            return self._stale(tree)
        new_node = self._new_node(tree, new_id)
        if new_node is None:
            return self._noop(tree, "Requested id already exists.", {"new_id": new_id})

        def _append(node: OutlineNode) -> OutlineNode:
            expanded = True if node.expanded is False else node.expanded
            return replace(node, children=list(node.children) + [new_node], expanded=expanded)

        new_tree = self._replace_node(tree, path, _append)
        logger.info("Edit OK: add_child parent=%s new=%s", target_id, new_node.id)
        return EditResult(new_tree, True, "Added child.", new_node.id, {"new_id": new_node.id})

    def indent(
        self,
        tree: Outline,
        target_id: str,
        parent_id: Optional[str] = None,
        new_text: Optional[str] = None,
    ) -> EditResult:
        """Make *target_id* the last child of its preceding sibling.

        When *new_text* is given it replaces the node's text in the same
        transformation. Indenting the first sibling is a no-op.
        """
        path = self._locate(tree, target_id, parent_id)
        if path is None:
            return self._stale(tree)
        index = path[-1]
        if index == 0:
            logger.debug("Edit noop: indent first_sibling node=%s", target_id)
            return self._noop(tree, "Cannot indent the first sibling.", {"target_id": target_id}, focus_id=target_id)

        def _transform(siblings: Outline) -> Outline:
            moved = self._with_text(siblings[index], new_text)
            new_parent = siblings[index - 1]
            new_parent = replace(new_parent, children=list(new_parent.children) + [moved])
            return siblings[:index - 1] + [new_parent] + siblings[index + 1:]

        new_tree = self._edit_siblings(tree, path[:-1], _transform)
        new_parent_id = node_at(tree, path[:-1] + [index - 1]).id
        logger.info("Edit OK: indent node=%s new_parent=%s", target_id, new_parent_id)
        return EditResult(new_tree, True, "Indented node.", target_id, {"target_id": target_id, "parent_id": new_parent_id})

    def outdent(
        self,
        tree: Outline,
        target_id: str,
        parent_id: Optional[str] = None,
        new_text: Optional[str] = None,
    ) -> EditResult:
        """Move *target_id* out of its parent, right after that parent.

        The siblings that followed the target stay with the old parent. When
        the parent is a root node the target becomes a root node. A root-level
        target cannot be outdented. *new_text* is applied atomically as in
        :meth:`indent`.
        """
        path = self._locate(tree, target_id, parent_id)
        if path is None:
            return self._stale(tree)
        if len(path) == 1:
            logger.debug("Edit noop: outdent already_root node=%s", target_id)
            return self._noop(tree, "Node is already at root level.", {"target_id": target_id}, focus_id=target_id)

        parent_index = path[-2]
        index = path[-1]

        def _transform(siblings: Outline) -> Outline:
            old_parent = siblings[parent_index]
            children = list(old_parent.children)
            moved = self._with_text(children.pop(index), new_text)
            return siblings[:parent_index] + [replace(old_parent, children=children), moved] + siblings[parent_index + 1:]

        new_tree = self._edit_siblings(tree, path[:-2], _transform)
        logger.info("Edit OK: outdent node=%s", target_id)
        return EditResult(new_tree, True, "Outdented node.", target_id, {"target_id": target_id})

    def move_up(self, tree: Outline, target_id: str, parent_id: Optional[str] = None) -> EditResult:
        """Swap *target_id* with its preceding sibling."""
        return self._move_sibling(tree, target_id, parent_id, delta=-1)

    def move_down(self, tree: Outline, target_id: str, parent_id: Optional[str] = None) -> EditResult:
        """Swap *target_id* with its following sibling."""
        return self._move_sibling(tree, target_id, parent_id, delta=1)

    def move_to(
        self,
        tree: Outline,
        dragged_id: str,
        target_id: str,
        drop_position: Union[DropPosition, str, None],
    ) -> EditResult:
        """Detach *dragged_id* with its subtree and reinsert it relative to *target_id*.

        ``before``/``after`` insert at the target's level; ``inside`` appends
        as the target's last child and expands a collapsed target. Moves onto
        the node itself or into its own subtree are rejected.
        """
        try:
            position = DropPosition(drop_position)
        except ValueError:
            return self._noop(tree, f"Unsupported drop position '{drop_position}'.", {"allowed": [p.value for p in DropPosition]})

        if dragged_id is None or target_id is None:
            return self._stale(tree)
        if not can_move_into(tree, dragged_id, target_id):
            return self._noop(tree, "Cannot move a node onto itself or into its own subtree.",
                              {"dragged_id": dragged_id, "target_id": target_id})

        dragged_path = index_path(tree, dragged_id)
        dragged = node_at(tree, dragged_path)
        detached = self._edit_siblings(
            tree, dragged_path[:-1], lambda siblings: siblings[:dragged_path[-1]] + siblings[dragged_path[-1] + 1:]
        )

        # Indices may have shifted after the detach
        target_path = index_path(detached, target_id)
        if position is DropPosition.INSIDE:
            def _adopt(node: OutlineNode) -> OutlineNode:
                expanded = True if node.expanded is False else node.expanded
                return replace(node, children=list(node.children) + [dragged], expanded=expanded)

            new_tree = self._replace_node(detached, target_path, _adopt)
        else:
            insert_at = target_path[-1] + (1 if position is DropPosition.AFTER else 0)
            new_tree = self._edit_siblings(
                detached, target_path[:-1], lambda siblings: siblings[:insert_at] + [dragged] + siblings[insert_at:]
            )

        details = {"dragged_id": dragged_id, "target_id": target_id, "position": position.value}
        if new_tree == tree:
            logger.debug("Edit noop: move_to same_position node=%s", dragged_id)
            return self._noop(tree, "Node is already at that position.", details, focus_id=dragged_id)
        logger.info("Edit OK: move_to node=%s target=%s position=%s", dragged_id, target_id, position.value)
        return EditResult(new_tree, True, "Moved node.", dragged_id, details)

    def update_node(
        self,
        tree: Outline,
        target_id: str,
        text: Optional[str] = None,
        expanded: Optional[bool] = None,
    ) -> EditResult:
        """Overwrite the text and/or expanded flag of *target_id*.

        Arguments left as None are not touched.
        """
        path = self._locate(tree, target_id, None, check_parent=False)
        if path is None:
            return self._stale(tree)
        node = node_at(tree, path)
        changes: Dict[str, Any] = {}
        if text is not None and text != node.text:
            changes["text"] = text
        # An unset flag counts as expanded
        if expanded is not None and bool(expanded) != (not node.is_collapsed()):
            changes["expanded"] = bool(expanded)
        if not changes:
            return self._noop(tree, "Nothing to update.", {"target_id": target_id})

        new_tree = self._replace_node(tree, path, lambda n: replace(n, **changes))
        logger.info("Edit OK: update node=%s fields=%s", target_id, ",".join(sorted(changes)))
        return EditResult(new_tree, True, "Updated node.", None, {"target_id": target_id, "fields": sorted(changes)})

    def toggle_expanded(self, tree: Outline, target_id: str) -> EditResult:
        """Flip the expanded flag of *target_id*; an unset flag counts as expanded."""
        path = self._locate(tree, target_id, None, check_parent=False)
        if path is None:
            return self._stale(tree)
        node = node_at(tree, path)
        return self.update_node(tree, target_id, expanded=node.is_collapsed())

    def delete_node(self, tree: Outline, target_id: str, parent_id: Optional[str] = None) -> EditResult:
        """Remove *target_id* together with its subtree.

        The focus hint names the node displayed just before the deleted one,
        or its parent when the deleted node is not currently visible.
        """
        path = self._locate(tree, target_id, parent_id)
        if path is None:
            return self._stale(tree)

        order = visible_order(tree)
        focus_id: Optional[str] = None
        if target_id in order and order.index(target_id) > 0:
            focus_id = order[order.index(target_id) - 1]
        elif len(path) > 1:
            focus_id = node_at(tree, path[:-1]).id

        index = path[-1]
        new_tree = self._edit_siblings(tree, path[:-1], lambda siblings: siblings[:index] + siblings[index + 1:])
        logger.info("Edit OK: delete node=%s", target_id)
        return EditResult(new_tree, True, "Deleted node.", focus_id, {"target_id": target_id})

    # -------------------------------------------------------------------------
    # Internal helpers (non-destructive, isolated)
    # -------------------------------------------------------------------------

    def _insert_sibling(
        self,
        tree: Outline,
        target_id: str,
        parent_id: Optional[str],
        new_id: Optional[str],
        *,
        offset: int,
        label: str,
    ) -> EditResult:
        path = self._locate(tree, target_id, parent_id)
        if path is None:
            return self._stale(tree)
        new_node = self._new_node(tree, new_id)
        if new_node is None:
            return self._noop(tree, "Requested id already exists.", {"new_id": new_id})

        insert_at = path[-1] + offset
        new_tree = self._edit_siblings(
            tree, path[:-1], lambda siblings: siblings[:insert_at] + [new_node] + siblings[insert_at:]
        )
        logger.info("Edit OK: %s target=%s new=%s", label, target_id, new_node.id)
        return EditResult(new_tree, True, "Added sibling.", new_node.id, {"target_id": target_id, "new_id": new_node.id})

    def _move_sibling(self, tree: Outline, target_id: str, parent_id: Optional[str], *, delta: int) -> EditResult:
        direction = "up" if delta < 0 else "down"
        path = self._locate(tree, target_id, parent_id)
        if path is None:
            return self._stale(tree)

        index = path[-1]
        other = index + delta
        sibling_count = len(tree) if len(path) == 1 else len(node_at(tree, path[:-1]).children)
        if other < 0 or other >= sibling_count:
            logger.debug("Edit noop: move_%s boundary node=%s", direction, target_id)
            return self._noop(tree, f"Cannot move {direction} (at boundary).", {"target_id": target_id}, focus_id=target_id)

        def _swap(siblings: Outline) -> Outline:
            siblings[index], siblings[other] = siblings[other], siblings[index]
            return siblings

        new_tree = self._edit_siblings(tree, path[:-1], _swap)
        logger.info("Edit OK: move_%s node=%s", direction, target_id)
        return EditResult(new_tree, True, f"Moved node {direction}.", target_id, {"target_id": target_id})

    @staticmethod
    def _locate(
        tree: Outline,
        target_id: Optional[str],
        parent_id: Optional[str],
        *,
        check_parent: bool = True,
    ) -> Optional[List[int]]:
        """Resolve *target_id* to its index path, honouring the parent hint."""
        if target_id is None:
            return None
        path = index_path(tree, target_id)
        if path is None:
            return None
        if check_parent and parent_id is not None:
            if len(path) == 1 or node_at(tree, path[:-1]).id != parent_id:
                return None
        return path

    def _new_node(self, tree: Outline, new_id: Optional[str]) -> Optional[OutlineNode]:
        """Create an empty node with a fresh id; None if *new_id* is taken."""
        existing = collect_ids(tree)
        if new_id is not None:
            return None if new_id in existing else OutlineNode(id=new_id)
        node_id = self._id_factory()
        while node_id in existing:
            node_id = self._id_factory()
        return OutlineNode(id=node_id)

    @staticmethod
    def _with_text(node: OutlineNode, new_text: Optional[str]) -> OutlineNode:
        return node if new_text is None else replace(node, text=new_text)

    @classmethod
    def _replace_node(
        cls,
        tree: Outline,
        path: List[int],
        transform: Callable[[OutlineNode], OutlineNode],
    ) -> Outline:
        """Return a new forest where the node at *path* is ``transform(node)``.

        Every ancestor on the path is copied; everything else is shared.
        """
        new_nodes = list(tree)
        index = path[0]
        if len(path) == 1:
            new_nodes[index] = transform(tree[index])
        else:
            node = tree[index]
            new_nodes[index] = replace(node, children=cls._replace_node(node.children, path[1:], transform))
        return new_nodes

    @classmethod
    def _edit_siblings(
        cls,
        tree: Outline,
        parent_path: List[int],
        transform: Callable[[Outline], Outline],
    ) -> Outline:
        """Apply *transform* to a copy of the sibling list under *parent_path*.

        An empty *parent_path* addresses the root list.
        """
        if not parent_path:
            return transform(list(tree))
        return cls._replace_node(
            tree, parent_path, lambda parent: replace(parent, children=transform(list(parent.children)))
        )

    @staticmethod
    def _noop(
        tree: Outline,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        focus_id: Optional[str] = None,
    ) -> EditResult:
        return EditResult(tree, False, message, focus_id, details)

    @staticmethod
    def _stale(tree: Outline) -> EditResult:
        return EditResult(tree, False, "Target not found.", None, {"reason": "not_found"})
