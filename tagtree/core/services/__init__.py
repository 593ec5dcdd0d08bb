from __future__ import annotations

"""Structural services for the element tree.

The codec, validator, resolver and relocator are pure functions over flat
snapshots; :class:`DragDropService` wires them into a drag gesture.
"""

from .tree_codec import flatten, reconstruct  # noqa: F401
from .move_validator import can_move  # noqa: F401
from .drop_resolver import DropResolver, resolve_drop  # noqa: F401
from .subtree_relocator import relocate  # noqa: F401
from .drag_drop_service import DragDropService, OperationResult  # noqa: F401

__all__: list[str] = [
    "flatten",
    "reconstruct",
    "can_move",
    "DropResolver",
    "resolve_drop",
    "relocate",
    "DragDropService",
    "OperationResult",
]
