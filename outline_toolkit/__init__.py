"""Top-level package for the outline toolkit.

This package hosts the GUI-agnostic outline editing engine. Front-ends
should only depend on the public API exposed here rather than importing
internal modules directly.
"""

from .core.models import DropPosition, Operation, OperationKind, OutlineNode, normalize_outline
from .core.session import ChangeEvent, EditSession

__all__: list[str] = [
    "OutlineNode",
    "Operation",
    "OperationKind",
    "DropPosition",
    "normalize_outline",
    "EditSession",
    "ChangeEvent",
]
