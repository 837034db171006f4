from __future__ import annotations

"""Operation value objects describing a single user intent.

An :class:`Operation` is built by the view layer for one gesture, handed to
``StructureEditingService.apply`` once and then discarded. Decoding raw,
loosely-typed payloads happens here so the editing service only ever sees
well-formed values.

Supported kinds:
- "addSibling", "addSiblingBefore", "addChild": insert an empty node
- "indent", "outdent": change the depth of a node (optional ``new_text``)
- "moveUp", "moveDown": swap with a neighbouring sibling
- "moveTo": drag-and-drop reparenting (``dragged_id``, ``drop_position``)
- "update": overwrite text and/or expanded flag (``updates``)
- "delete": remove a node with its subtree
- "toggleExpanded": flip the disclosure flag
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from outline_toolkit.core.exceptions import InvalidOperationError

__all__ = ["OperationKind", "DropPosition", "Operation"]


class OperationKind(str, Enum):
    ADD_SIBLING = "addSibling"
    ADD_SIBLING_BEFORE = "addSiblingBefore"
    ADD_CHILD = "addChild"
    INDENT = "indent"
    OUTDENT = "outdent"
    MOVE_UP = "moveUp"
    MOVE_DOWN = "moveDown"
    MOVE_TO = "moveTo"
    UPDATE = "update"
    DELETE = "delete"
    TOGGLE_EXPANDED = "toggleExpanded"


class DropPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    INSIDE = "inside"


# camelCase payload key -> dataclass field
_KEY_ALIASES = {
    "kind": "kind",
    "type": "kind",
    "targetId": "target_id",
    "id": "target_id",
    "parentId": "parent_id",
    "newText": "new_text",
    "text": "new_text",
    "draggedId": "dragged_id",
    "targetAnchorId": "target_anchor_id",
    "dropPosition": "drop_position",
    "newId": "new_id",
}


@dataclass(frozen=True)
class Operation:
    """One decoded edit intent.

    Attributes
    ----------
    kind
        Which edit to perform.
    target_id
        Node the operation applies to. For ``moveTo`` it may also name the
        drop target when ``target_anchor_id`` is not given.
    parent_id
        Parent of the target as last seen by the caller; ``None`` for root
        nodes or when the caller does not know it.
    new_text
        Unsaved text captured at gesture time (``indent``/``outdent``) or the
        replacement text for ``update``.
    dragged_id, target_anchor_id, drop_position
        Drag-and-drop parameters for ``moveTo``.
    new_id
        Optional id for the node created by the add operations.
    updates
        Field overrides for ``update`` (``text`` and/or ``expanded``).
    """

    kind: OperationKind
    target_id: Optional[str] = None
    parent_id: Optional[str] = None
    new_text: Optional[str] = None
    dragged_id: Optional[str] = None
    target_anchor_id: Optional[str] = None
    drop_position: Optional[DropPosition] = None
    new_id: Optional[str] = None
    updates: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        # Frozen dataclass: coerce plain strings through object.__setattr__
        object.__setattr__(self, "kind", _coerce_kind(self.kind))
        if self.drop_position is not None:
            object.__setattr__(self, "drop_position", _coerce_drop_position(self.drop_position))

    @property
    def anchor_id(self) -> Optional[str]:
        """Drop target for ``moveTo``: the explicit anchor, else ``target_id``."""
        return self.target_anchor_id if self.target_anchor_id is not None else self.target_id

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Operation":
        """Decode a camelCase or snake_case mapping into an Operation.

        Unknown keys are ignored. ``expanded`` is routed into ``updates``.
        """
        if not isinstance(payload, Mapping):
            raise InvalidOperationError(f"Operation payload must be a mapping, got {type(payload).__name__}.")

        fields: Dict[str, Any] = {}
        updates: Dict[str, Any] = dict(payload.get("updates") or {})
        for key, value in payload.items():
            name = _KEY_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__ and name != "updates":
                fields[name] = value
        if "expanded" in payload:
            updates["expanded"] = payload["expanded"]
        if "kind" not in fields:
            raise InvalidOperationError("Operation payload is missing its kind.")
        if updates:
            fields["updates"] = updates
        return cls(**fields)


def _coerce_kind(value: Any) -> OperationKind:
    try:
        return OperationKind(value)
    except ValueError as exc:
        raise InvalidOperationError(f"Unknown operation kind '{value}'.", cause=exc) from exc


def _coerce_drop_position(value: Any) -> DropPosition:
    try:
        return DropPosition(value)
    except ValueError as exc:
        raise InvalidOperationError(f"Unknown drop position '{value}'.", cause=exc) from exc
