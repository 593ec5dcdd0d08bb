from __future__ import annotations

"""Translate a pointer position into a structural drop intent.

The drop line of a hovered row always sits between the row (``target``) and
the row displayed just above it (``prev``). Which depth the dragged node
should take there is ambiguous only at a hierarchy boundary, i.e. when
``prev`` is nested deeper than ``target`` and a child list has just ended.
The pointer's horizontal offset disambiguates:

    hovered depth = floor((pointer_x - box.left - padding) / indent_unit)

clamped into the legal range for that gap:

- boundary (``prev.depth > target.depth``): ``[target.depth, prev.depth + 1]``,
  every depth in the range being a sibling insert before ``target`` under the
  matching ancestor of ``prev`` (``prev`` itself at the deepest level);
- otherwise: ``target.depth`` (before ``target``) or ``target.depth + 1``
  (first child of ``target``).

Hovering the end sentinel always yields "sibling after the last row".

All work per tick is O(depth) once an id-to-position index is supplied.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from tagtree.core.exceptions import NodeNotFoundError
from tagtree.core.models import (
    DragSettings,
    DropIndicator,
    DropIntent,
    FlatNode,
    PointerSample,
)
from tagtree.core.services.move_validator import can_move, move_rejection_reason
from tagtree.core.services.tree_codec import index_positions

__all__ = [
    "DropResolver",
    "depth_range",
    "hovered_depth",
    "resolve_drop",
    "build_indicator",
]

logger = logging.getLogger(__name__)


def depth_range(prev: Optional[FlatNode], target: FlatNode) -> Tuple[int, int]:
    """Return the inclusive (min, max) depths a drop above ``target`` may take."""
    if prev is not None and prev.depth > target.depth:
        return min(prev.depth, target.depth), max(prev.depth, target.depth) + 1
    return target.depth, target.depth + 1


def hovered_depth(sample: PointerSample, settings: DragSettings) -> int:
    """Return the depth column under the pointer (may be negative left of the padding)."""
    padding = sample.content_padding
    if padding is None:
        padding = settings.content_padding
    offset = sample.pointer_x - sample.box.left - padding
    return int(math.floor(offset / settings.indent_unit))


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _intent_for_depth(prev: Optional[FlatNode], target: FlatNode, depth: int) -> DropIntent:
    if depth == target.depth:
        return DropIntent(
            depth=depth,
            parent_id=target.parent_id,
            ancestor_chain=target.ancestor_chain,
            insertion_kind="sibling",
            target_id=target.id,
        )

    if prev is None or prev.depth <= target.depth:
        # Only other candidate outside a boundary: nest under the target.
        return DropIntent(
            depth=depth,
            parent_id=target.id,
            ancestor_chain=target.ancestor_chain + (target.id,),
            insertion_kind="first-child",
            target_id=target.id,
        )

    if depth == prev.depth + 1:
        chain = prev.ancestor_chain + (prev.id,)
    else:
        chain = prev.ancestor_chain[:depth]
    return DropIntent(
        depth=depth,
        parent_id=chain[-1],
        ancestor_chain=chain,
        insertion_kind="sibling",
        target_id=target.id,
    )


def _resolve_tail(
    flat: List[FlatNode], dragged_id: str, index: Dict[str, int]
) -> DropIntent:
    anchor = flat[-1]
    if anchor.id == dragged_id or dragged_id in anchor.ancestor_chain:
        # Dragged block already ends the list: drop back in place.
        anchor = flat[index[dragged_id]]
    return DropIntent(
        depth=anchor.depth,
        parent_id=anchor.parent_id,
        ancestor_chain=anchor.ancestor_chain,
        insertion_kind="sibling",
        target_id=anchor.id,
        position="after",
    )


def resolve_drop(
    flat: List[FlatNode],
    dragged_id: str,
    sample: PointerSample,
    settings: Optional[DragSettings] = None,
    index: Optional[Dict[str, int]] = None,
) -> Optional[DropIntent]:
    """Return the drop intent for ``sample``, or None when no drop is possible there.

    Raises :class:`NodeNotFoundError` if ``dragged_id`` is not in ``flat``;
    every other refusal is reported as None.
    """
    settings = settings or DragSettings()
    if index is None:
        index = index_positions(flat)
    if dragged_id not in index:
        raise NodeNotFoundError("Dragged element is not in the flat list", node_id=dragged_id)

    target_id = sample.target_id
    if target_id == dragged_id:
        return None
    if target_id == settings.end_sentinel_id:
        return _resolve_tail(flat, dragged_id, index)

    reason = move_rejection_reason(flat, dragged_id, target_id, index)
    if reason is not None:
        logger.debug("Drop refused over %s: %s", target_id, reason)
        return None

    pos = index[target_id]
    target = flat[pos]
    prev = flat[pos - 1] if pos > 0 else None

    low, high = depth_range(prev, target)
    depth = _clamp(hovered_depth(sample, settings), low, high)

    intent = _intent_for_depth(prev, target, depth)
    if intent.parent_id is not None and not can_move(flat, dragged_id, intent.parent_id, index):
        logger.debug(
            "Drop refused over %s: parent %s lies in dragged subtree", target_id, intent.parent_id
        )
        return None
    return intent


def build_indicator(
    intent: DropIntent, sample: PointerSample, settings: DragSettings
) -> DropIndicator:
    """Return preview line geometry for ``intent`` relative to the hovered box."""
    box = sample.box
    padding = sample.content_padding
    if padding is None:
        padding = settings.content_padding
    x = box.left + padding + intent.depth * settings.indent_unit
    if intent.insertion_kind == "first-child":
        y = box.top + box.height * settings.child_indicator_ratio
    else:
        y = box.top
    width = max(0.0, box.width - (x - box.left))
    return DropIndicator(intent=intent, x=x, y=y, width=width)


class DropResolver:
    """Stateless resolver bound to one set of drag geometry settings."""

    def __init__(self, settings: Optional[DragSettings] = None) -> None:
        self.settings = settings or DragSettings()

    def resolve(
        self,
        flat: List[FlatNode],
        dragged_id: str,
        sample: PointerSample,
        index: Optional[Dict[str, int]] = None,
    ) -> Optional[DropIntent]:
        return resolve_drop(flat, dragged_id, sample, self.settings, index)

    def preview(
        self,
        flat: List[FlatNode],
        dragged_id: str,
        sample: PointerSample,
        index: Optional[Dict[str, int]] = None,
    ) -> Optional[DropIndicator]:
        """Resolve ``sample`` and attach the indicator geometry, or return None."""
        intent = self.resolve(flat, dragged_id, sample, index)
        if intent is None:
            return None
        indicator = build_indicator(intent, sample, self.settings)
        logger.debug(
            "Drop preview: dragged=%s target=%s kind=%s depth=%d parent=%s",
            dragged_id,
            intent.target_id,
            intent.insertion_kind,
            intent.depth,
            intent.parent_id,
        )
        return indicator
