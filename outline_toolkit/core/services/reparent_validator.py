from __future__ import annotations

"""Topology guard for drag-and-drop reparenting.

A move is legal only when both nodes exist, they are distinct, and the drop
target does not live inside the dragged subtree. Accepting any other move
would either lose the dragged subtree or make a node its own ancestor.
"""

import logging
from typing import List

from outline_toolkit.core.models import OutlineNode
from outline_toolkit.core.node_store import find, is_descendant

__all__ = ["can_move_into"]

logger = logging.getLogger(__name__)


def can_move_into(tree: List[OutlineNode], dragged_id: str, target_id: str) -> bool:
    """Return True if *dragged_id* may be dropped relative to *target_id*."""
    if dragged_id == target_id:
        return False

    # Stale references are rejected without logging
    dragged = find(tree, dragged_id)
    if dragged is None or find(tree, target_id) is None:
        return False

    if is_descendant(dragged.node, target_id):
        logger.debug("Move rejected: target=%s is inside dragged subtree=%s", target_id, dragged_id)
        return False
    return True
