from __future__ import annotations

"""Move a node together with its whole subtree inside the flat list.

The dragged node and its descendants form one contiguous block of the
pre-order list. Relocation cuts that block out, rebases the depth and
ancestry of every node in it onto the intent's parent, splices it back at
the anchor-relative insertion point, then renumbers sibling order and
``has_children`` for the whole list.

Input lists are never mutated; a new list is returned.
"""

from dataclasses import replace
from typing import Dict, List, Literal, Optional

from tagtree.core.exceptions import InvalidMoveError, NodeNotFoundError
from tagtree.core.models import DropIntent, FlatNode
from tagtree.core.services.tree_codec import index_positions, subtree_end

__all__ = ["relocate", "recalculate_order", "calculate_new_position"]


def recalculate_order(flat: List[FlatNode]) -> List[FlatNode]:
    """Return ``flat`` with sibling order and ``has_children`` recomputed from list order."""
    parents = {entry.parent_id for entry in flat if entry.parent_id is not None}
    counters: Dict[Optional[str], int] = {}
    result: List[FlatNode] = []
    for entry in flat:
        order = counters.get(entry.parent_id, 0)
        counters[entry.parent_id] = order + 1
        has_children = entry.id in parents
        if entry.order != order or entry.has_children != has_children:
            entry = replace(entry, order=order, has_children=has_children)
        result.append(entry)
    return result


def _check_intent(
    flat: List[FlatNode], index: Dict[str, int], dragged_id: str, intent: DropIntent
) -> None:
    expected_parent = intent.ancestor_chain[-1] if intent.ancestor_chain else None
    if len(intent.ancestor_chain) != intent.depth or intent.parent_id != expected_parent:
        raise InvalidMoveError(dragged_id, "drop intent depth, parent and chain disagree")
    if dragged_id in intent.ancestor_chain:
        raise InvalidMoveError(dragged_id, "target parent lies inside the dragged subtree")

    if intent.parent_id is not None:
        parent_pos = index.get(intent.parent_id)
        if parent_pos is None:
            raise NodeNotFoundError("Intent parent is not in the flat list", node_id=intent.parent_id)
        parent = flat[parent_pos]
        if parent.ancestor_chain + (parent.id,) != intent.ancestor_chain:
            raise InvalidMoveError(dragged_id, "intent chain does not match the parent's ancestry")

    if intent.insertion_kind in ("first-child", "child") and intent.parent_id != intent.target_id:
        raise InvalidMoveError(dragged_id, f"'{intent.insertion_kind}' insert must be under its anchor")


def _insertion_index(flat: List[FlatNode], anchor_pos: int, intent: DropIntent) -> int:
    if intent.insertion_kind == "first-child":
        return anchor_pos + 1
    if intent.insertion_kind == "child":
        return subtree_end(flat, anchor_pos)
    if intent.position == "after":
        return subtree_end(flat, anchor_pos)
    return anchor_pos


def _rebase(block: List[FlatNode], dragged_id: str, intent: DropIntent) -> List[FlatNode]:
    root = block[0]
    new_prefix = intent.ancestor_chain + (dragged_id,)
    # Every descendant chain holds dragged_id at position root.depth.
    cut = root.depth + 1
    moved = [
        replace(
            root,
            depth=intent.depth,
            parent_id=intent.parent_id,
            ancestor_chain=intent.ancestor_chain,
        )
    ]
    for entry in block[1:]:
        chain = new_prefix + entry.ancestor_chain[cut:]
        moved.append(replace(entry, depth=len(chain), ancestor_chain=chain))
    return moved


def relocate(flat: List[FlatNode], dragged_id: str, intent: DropIntent) -> List[FlatNode]:
    """Return a new flat list with ``dragged_id`` and its subtree moved per ``intent``.

    Total over intents accepted by the move validator. Raises
    :class:`NodeNotFoundError` for unknown ids and :class:`InvalidMoveError`
    for intents that would form a cycle or are internally inconsistent.
    """
    index = index_positions(flat)
    dragged_pos = index.get(dragged_id)
    if dragged_pos is None:
        raise NodeNotFoundError("Dragged element is not in the flat list", node_id=dragged_id)
    anchor_pos = index.get(intent.target_id)
    if anchor_pos is None:
        raise NodeNotFoundError("Drop anchor is not in the flat list", node_id=intent.target_id)

    _check_intent(flat, index, dragged_id, intent)

    block_end = subtree_end(flat, dragged_pos)
    insert_at = _insertion_index(flat, anchor_pos, intent)
    if dragged_pos < insert_at < block_end:
        raise InvalidMoveError(dragged_id, "insertion point lies inside the dragged subtree")

    block = flat[dragged_pos:block_end]
    if dragged_pos < insert_at:
        insert_at -= len(block)

    remaining = flat[:dragged_pos] + flat[block_end:]
    moved = _rebase(block, dragged_id, intent)
    result = remaining[:insert_at] + moved + remaining[insert_at:]
    return recalculate_order(result)


def calculate_new_position(
    flat: List[FlatNode],
    target_id: str,
    drop_type: Literal["before", "after", "child"],
    index: Optional[Dict[str, int]] = None,
) -> DropIntent:
    """Build the intent for a programmatic move relative to ``target_id``.

    ``before`` / ``after`` make the node a sibling of the target, ``child``
    appends it as the target's last child.
    """
    if index is None:
        index = index_positions(flat)
    pos = index.get(target_id)
    if pos is None:
        raise NodeNotFoundError("Target element is not in the flat list", node_id=target_id)
    target = flat[pos]

    if drop_type in ("before", "after"):
        return DropIntent(
            depth=target.depth,
            parent_id=target.parent_id,
            ancestor_chain=target.ancestor_chain,
            insertion_kind="sibling",
            target_id=target.id,
            position=drop_type,
        )
    if drop_type == "child":
        return DropIntent(
            depth=target.depth + 1,
            parent_id=target.id,
            ancestor_chain=target.ancestor_chain + (target.id,),
            insertion_kind="child",
            target_id=target.id,
        )
    raise ValueError(f"Invalid drop type: {drop_type!r}")
