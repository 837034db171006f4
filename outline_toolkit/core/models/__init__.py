from __future__ import annotations

"""Shared data structures used across the outline toolkit core.

This package exposes dataclasses and value objects used by services and other
core layers. It is intentionally free of UI / I/O code so that the contained
objects can be reused in any context (unit-tests, CLI, GUI, etc.).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from outline_toolkit.core.exceptions import InvalidOutlineError
from .operation import DropPosition, Operation, OperationKind

__all__ = [
    "OutlineNode",
    "Outline",
    "Operation",
    "OperationKind",
    "DropPosition",
    "normalize_outline",
]


@dataclass
class OutlineNode:
    """A single labelled node of the outline forest.

    Attributes
    ----------
    id
        Opaque identifier, unique across the forest and stable for the
        node's lifetime.
    text
        Raw source text of the node (Markdown or plain, never interpreted).
    children
        Ordered child nodes; the order is the display order.
    expanded
        Tri-state disclosure flag. ``None`` means "unset" and is treated as
        expanded by operations that read it.

    Notes
    -----
    Dataclass equality compares every field recursively, so ``==`` on two
    nodes (or two lists of nodes) is a full deep-equality check.
    """

    id: str
    text: str = ""
    children: List["OutlineNode"] = field(default_factory=list)
    expanded: Optional[bool] = True

    def has_children(self) -> bool:
        """Return True if this node has child nodes."""
        return len(self.children) > 0

    def is_collapsed(self) -> bool:
        """Return True only when the node is explicitly collapsed."""
        return self.expanded is False

    def copy(self) -> "OutlineNode":
        """Return an independent deep copy of this node and its subtree."""
        return OutlineNode(
            id=self.id,
            text=self.text,
            children=[child.copy() for child in self.children],
            expanded=self.expanded,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain nested-dict view suitable for collaborators."""
        data: Dict[str, Any] = {"id": self.id, "text": self.text}
        if self.expanded is not None:
            data["expanded"] = self.expanded
        data["children"] = [child.to_dict() for child in self.children]
        return data


# A forest of root-level nodes
Outline = List[OutlineNode]


def _coerce_expanded(value: Any, node_id: str) -> Optional[bool]:
    """Accept booleans, None, and the literals "true"/"false" (any case)."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidOutlineError(
        f"Node expanded flag must be a boolean, got {value!r}.", node_id=node_id
    )


def normalize_outline(
    data: Iterable[Union[Mapping[str, Any], OutlineNode]],
    id_factory: Optional[Callable[[], str]] = None,
) -> Outline:
    """Build an outline forest from loosely-typed input records.

    Each record is a mapping with an ``id``, optional ``text``, optional
    ``expanded`` flag and optional ``children`` list. Missing ``expanded``
    defaults to True and missing ``children`` to an empty list. Records
    without an ``id`` receive one from *id_factory*. ``OutlineNode`` values
    are accepted as-is and deep-copied.

    Raises
    ------
    InvalidOutlineError
        When a record is not a mapping, ``children`` is not a list,
        ``expanded`` is not a boolean (or "true"/"false"), or an id appears
        more than once.
    """
    if id_factory is None:
        from outline_toolkit.core.utils import generate_node_id as id_factory

    seen: Set[str] = set()

    def _build(record: Union[Mapping[str, Any], OutlineNode]) -> OutlineNode:
        if isinstance(record, OutlineNode):
            record = record.to_dict()
        if not isinstance(record, Mapping):
            raise InvalidOutlineError(
                f"Outline entries must be mappings, got {type(record).__name__}."
            )

        node_id = record.get("id")
        if node_id is None or node_id == "":
            node_id = id_factory()
            while node_id in seen:
                node_id = id_factory()
        node_id = str(node_id)
        if node_id in seen:
            raise InvalidOutlineError(
                "Duplicate node id in outline data.",
                node_id=node_id,
                violations=[f"duplicate id '{node_id}'"],
            )
        seen.add(node_id)

        raw_children = record.get("children")
        if raw_children is None:
            raw_children = []
        if isinstance(raw_children, (str, bytes, Mapping)) or not isinstance(raw_children, Iterable):
            raise InvalidOutlineError("Node children must be a list.", node_id=node_id)

        expanded = record.get("expanded", True)
        text = record.get("text")
        return OutlineNode(
            id=node_id,
            text="" if text is None else str(text),
            children=[_build(child) for child in raw_children],
            expanded=_coerce_expanded(expanded, node_id),
        )

    if isinstance(data, Mapping):
        raise InvalidOutlineError("Outline data must be a list of root nodes, not a single mapping.")
    return [_build(record) for record in data]
