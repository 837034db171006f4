from __future__ import annotations

"""Editing services operating on in-memory outline forests.

Services are instantiated directly; none of them keeps a reference to the
forest they edit.
"""

from .structure_editing_service import EditResult, StructureEditingService  # noqa: F401
from .history_service import ChangeOrigin, HistoryEntry, HistoryService  # noqa: F401
from .reparent_validator import can_move_into  # noqa: F401

__all__: list[str] = [
    "EditResult",
    "StructureEditingService",
    "ChangeOrigin",
    "HistoryEntry",
    "HistoryService",
    "can_move_into",
]
