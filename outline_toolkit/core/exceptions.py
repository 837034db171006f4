from __future__ import annotations

"""Outline toolkit exception classes.

The mutation engine itself never raises for stale references or rejected
moves; these exceptions only surface at the boundaries where loosely-typed
input is decoded into outline nodes or operations.
"""

from typing import List, Optional

__all__ = [
    "OutlineError",
    "InvalidOutlineError",
    "InvalidOperationError",
]


class OutlineError(Exception):
    """Base exception for all outline-related errors."""

    def __init__(self, message: str, node_id: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.node_id = node_id
        self.cause = cause

    def __str__(self) -> str:
        if self.node_id:
            return f"[Node: {self.node_id}] {super().__str__()}"
        return super().__str__()


class InvalidOutlineError(OutlineError):
    """Raised when ingested outline data breaks a structural invariant.

    This includes duplicate ids, entries that are not mappings and children
    collections that are not sequences.
    """

    def __init__(self, message: str, node_id: Optional[str] = None,
                 violations: Optional[List[str]] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, node_id, cause)
        self.violations = violations or []


class InvalidOperationError(OutlineError):
    """Raised when an operation payload cannot be decoded.

    Unknown operation kinds or drop positions are rejected here, before the
    value ever reaches the editing service.
    """
    pass
