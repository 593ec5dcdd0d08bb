from __future__ import annotations

"""Exception classes for structural tree operations.

User-facing rejections (an illegal drop target, a pointer over the dragged
node) are not errors and never raise. The exceptions below signal a broken
precondition instead: a flat list that was not produced by the codec, or a
caller that skipped move validation.
"""

from typing import Optional


class TreeError(Exception):
    """Base exception for all tree structure errors."""

    def __init__(self, message: str, node_id: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.node_id = node_id
        self.cause = cause

    def __str__(self) -> str:
        if self.node_id:
            return f"[Node: {self.node_id}] {super().__str__()}"
        return super().__str__()


class NodeNotFoundError(TreeError):
    """Raised when an id required by an operation is absent from the flat list."""
    pass


class TreeInvariantError(TreeError):
    """Raised when a flat list breaks depth, ancestry or ordering invariants.

    Carries the individual violations so diagnostics can report all of them
    at once rather than only the first.
    """

    def __init__(self, message: str, node_id: Optional[str] = None,
                 violations: Optional[list[str]] = None,
                 cause: Optional[Exception] = None) -> None:
        super().__init__(message, node_id, cause)
        self.violations = violations or []


class InvalidMoveError(TreeError):
    """Raised when a relocation is attempted with an intent that was never validated."""

    def __init__(self, dragged_id: str, reason: str) -> None:
        self.dragged_id = dragged_id
        self.reason = reason
        super().__init__(f"Cannot relocate node: {reason}", node_id=dragged_id)


__all__ = [
    "TreeError",
    "NodeNotFoundError",
    "TreeInvariantError",
    "InvalidMoveError",
]
