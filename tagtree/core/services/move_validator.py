from __future__ import annotations

"""Structural legality of a drag-and-drop move.

A move is refused for exactly three reasons: the node is dropped on itself,
one of the ids is unknown, or the target lives inside the dragged node's own
subtree (which would detach the subtree into a cycle). Tag names and text
never influence legality.
"""

from typing import Dict, List, Optional

from tagtree.core.models import FlatNode

__all__ = ["can_move", "move_rejection_reason"]

REASON_SELF = "cannot drop an element onto itself"
REASON_UNKNOWN_DRAGGED = "dragged element not found"
REASON_UNKNOWN_TARGET = "target element not found"
REASON_CYCLE = "cannot move an element into its own subtree"


def move_rejection_reason(
    flat: List[FlatNode],
    dragged_id: str,
    target_id: str,
    index: Optional[Dict[str, int]] = None,
) -> Optional[str]:
    """Return why moving ``dragged_id`` next to ``target_id`` is illegal, or None.

    ``index`` is an optional id-to-position map (see
    :func:`tagtree.core.services.tree_codec.index_positions`); with it the
    check costs O(depth) instead of a scan of the list.
    """
    if dragged_id == target_id:
        return REASON_SELF

    if index is not None:
        dragged_pos = index.get(dragged_id)
        target_pos = index.get(target_id)
        dragged = flat[dragged_pos] if dragged_pos is not None else None
        target = flat[target_pos] if target_pos is not None else None
    else:
        dragged = target = None
        for entry in flat:
            if entry.id == dragged_id:
                dragged = entry
            elif entry.id == target_id:
                target = entry

    if dragged is None:
        return REASON_UNKNOWN_DRAGGED
    if target is None:
        return REASON_UNKNOWN_TARGET
    if dragged_id in target.ancestor_chain:
        return REASON_CYCLE
    return None


def can_move(
    flat: List[FlatNode],
    dragged_id: str,
    target_id: str,
    index: Optional[Dict[str, int]] = None,
) -> bool:
    """Return True if the dragged node may be relocated relative to the target."""
    return move_rejection_reason(flat, dragged_id, target_id, index) is None
