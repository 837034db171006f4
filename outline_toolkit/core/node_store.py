from __future__ import annotations

"""Read-only lookups over an outline forest.

Every function here is total: missing ids produce ``None``/``False`` rather
than an exception, and no function mutates its input. Parents are never
stored on nodes; they are derived from containment during the walk.
"""

from typing import Iterator, List, NamedTuple, Optional, Set, Tuple

from outline_toolkit.core.models import OutlineNode

__all__ = [
    "FindResult",
    "find",
    "is_descendant",
    "iter_nodes",
    "collect_ids",
    "visible_order",
    "check_invariants",
    "index_path",
    "node_at",
]


class FindResult(NamedTuple):
    """Location of a node: the node, its parent (None at root) and its index."""

    node: OutlineNode
    parent: Optional[OutlineNode]
    index: int


def find(tree: List[OutlineNode], node_id: str) -> Optional[FindResult]:
    """Depth-first pre-order search for *node_id*; None when absent."""
    # Siblings are pushed in reverse to keep pre-order
    pending: List[Tuple[OutlineNode, Optional[OutlineNode], int]] = [
        (tree[index], None, index) for index in range(len(tree) - 1, -1, -1)
    ]
    while pending:
        node, parent, index = pending.pop()
        if node.id == node_id:
            return FindResult(node, parent, index)
        for child_index in range(len(node.children) - 1, -1, -1):
            pending.append((node.children[child_index], node, child_index))
    return None


def is_descendant(ancestor: OutlineNode, node_id: str) -> bool:
    """Return True if *node_id* lies strictly below *ancestor*.

    A node is not its own descendant.
    """
    pending = list(ancestor.children)
    while pending:
        node = pending.pop()
        if node.id == node_id:
            return True
        pending.extend(node.children)
    return False


def iter_nodes(tree: List[OutlineNode]) -> Iterator[Tuple[OutlineNode, Optional[OutlineNode], int]]:
    """Yield ``(node, parent, depth)`` for every node in pre-order."""
    pending: List[Tuple[OutlineNode, Optional[OutlineNode], int]] = [
        (node, None, 0) for node in reversed(tree)
    ]
    while pending:
        node, parent, depth = pending.pop()
        yield node, parent, depth
        for child in reversed(node.children):
            pending.append((child, node, depth + 1))


def collect_ids(tree: List[OutlineNode]) -> Set[str]:
    """Return the set of all ids in the forest."""
    return {node.id for node, _parent, _depth in iter_nodes(tree)}


def visible_order(tree: List[OutlineNode]) -> List[str]:
    """Return ids in display order, skipping the children of collapsed nodes."""
    order: List[str] = []
    pending = list(reversed(tree))
    while pending:
        node = pending.pop()
        order.append(node.id)
        if not node.is_collapsed():
            pending.extend(reversed(node.children))
    return order


def check_invariants(tree: List[OutlineNode]) -> List[str]:
    """Return a list of structural violations; empty when the forest is valid.

    Checks unique ids and that no node object is reachable twice (which
    would mean a cycle or a node shared between two parents).
    """
    violations: List[str] = []
    seen_ids: Set[str] = set()
    on_path: Set[int] = set()
    visited: Set[int] = set()

    def _walk(nodes: List[OutlineNode]) -> None:
        for node in nodes:
            marker = id(node)
            if marker in on_path:
                violations.append(f"cycle through node '{node.id}'")
                continue
            if marker in visited:
                violations.append(f"node '{node.id}' appears under more than one parent")
                continue
            visited.add(marker)
            if node.id in seen_ids:
                violations.append(f"duplicate id '{node.id}'")
            seen_ids.add(node.id)
            on_path.add(marker)
            _walk(node.children)
            on_path.discard(marker)

    _walk(tree)
    return violations


def index_path(tree: List[OutlineNode], node_id: str) -> Optional[List[int]]:
    """Return the child-index path from the root list to *node_id*, or None.

    ``[2]`` is the third root node, ``[2, 0]`` its first child, and so on.
    """
    pending: List[Tuple[OutlineNode, List[int]]] = [
        (tree[index], [index]) for index in range(len(tree) - 1, -1, -1)
    ]
    while pending:
        node, path = pending.pop()
        if node.id == node_id:
            return path
        for child_index in range(len(node.children) - 1, -1, -1):
            pending.append((node.children[child_index], path + [child_index]))
    return None


def node_at(tree: List[OutlineNode], path: List[int]) -> OutlineNode:
    """Return the node addressed by an index path from :func:`index_path`."""
    node = tree[path[0]]
    for index in path[1:]:
        node = node.children[index]
    return node
