from __future__ import annotations

"""Conversion between the nested element tree and its flat working list.

The flat list is a depth-first pre-order of the tree where every entry
remembers its depth, parent, full ancestor chain and position among its
siblings. All structural reasoning during a drag happens on this list; the
nested shape is rebuilt from it once a move is committed.

Functions here are pure: they never mutate their inputs and perform no I/O.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from tagtree.core.exceptions import TreeInvariantError
from tagtree.core.models import FlatNode, Node

__all__ = [
    "flatten",
    "reconstruct",
    "find_by_id",
    "get_all_descendants",
    "get_direct_children",
    "index_positions",
    "subtree_end",
    "visualize_flat",
    "verify_flat",
]

logger = logging.getLogger(__name__)


def flatten(nodes: Iterable[Node]) -> List[FlatNode]:
    """Return the flat pre-order list for the root-level ``nodes``."""
    result: List[FlatNode] = []
    # Explicit stack keeps very deep trees clear of the recursion limit.
    stack: List[Tuple[Node, int, Tuple[str, ...]]] = [
        (node, order, ()) for order, node in enumerate(nodes)
    ]
    stack.reverse()
    while stack:
        node, order, chain = stack.pop()
        result.append(
            FlatNode(
                id=node.id,
                tag=node.tag,
                text=node.text,
                depth=len(chain),
                parent_id=chain[-1] if chain else None,
                ancestor_chain=chain,
                order=order,
                has_children=node.has_children(),
                collapsed=node.collapsed,
            )
        )
        child_chain = chain + (node.id,)
        for child_order in range(len(node.children) - 1, -1, -1):
            stack.append((node.children[child_order], child_order, child_chain))
    return result


def reconstruct(flat: Iterable[FlatNode]) -> List[Node]:
    """Rebuild the nested tree from a flat list.

    Input order is irrelevant: siblings are sorted by ``order``. Raises
    :class:`TreeInvariantError` when a parent id is missing, ids repeat, or
    some entries are unreachable from the roots.
    """
    entries = list(flat)
    groups: Dict[Optional[str], List[FlatNode]] = {}
    ids = set()
    for entry in entries:
        if entry.id in ids:
            raise TreeInvariantError("Duplicate id in flat list", node_id=entry.id)
        ids.add(entry.id)
        groups.setdefault(entry.parent_id, []).append(entry)

    for parent_id in groups:
        if parent_id is not None and parent_id not in ids:
            raise TreeInvariantError(
                f"Parent '{parent_id}' is not present in the flat list",
                node_id=groups[parent_id][0].id,
            )

    for siblings in groups.values():
        siblings.sort(key=lambda e: e.order)

    roots: List[Node] = []
    built = 0
    stack: List[Tuple[FlatNode, List[Node]]] = [
        (entry, roots) for entry in reversed(groups.get(None, []))
    ]
    while stack:
        entry, into = stack.pop()
        node = Node(id=entry.id, tag=entry.tag, text=entry.text, collapsed=entry.collapsed)
        into.append(node)
        built += 1
        for child in reversed(groups.get(entry.id, [])):
            stack.append((child, node.children))

    if built != len(entries):
        raise TreeInvariantError(
            f"{len(entries) - built} node(s) are unreachable from the root level"
        )
    return roots


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def find_by_id(flat: List[FlatNode], node_id: str) -> Optional[FlatNode]:
    for entry in flat:
        if entry.id == node_id:
            return entry
    return None


def get_all_descendants(flat: List[FlatNode], node_id: str) -> List[FlatNode]:
    """Return every node below ``node_id`` (direct and nested), in list order."""
    return [entry for entry in flat if node_id in entry.ancestor_chain]


def get_direct_children(flat: List[FlatNode], parent_id: Optional[str]) -> List[FlatNode]:
    """Return the children of ``parent_id`` sorted by order (None = root level)."""
    children = [entry for entry in flat if entry.parent_id == parent_id]
    children.sort(key=lambda e: e.order)
    return children


def index_positions(flat: List[FlatNode]) -> Dict[str, int]:
    """Map each id to its position in ``flat``.

    Built once per drag gesture so that per-tick lookups stay O(1).
    """
    return {entry.id: i for i, entry in enumerate(flat)}


def subtree_end(flat: List[FlatNode], position: int) -> int:
    """Return the exclusive end index of the pre-order block rooted at ``position``."""
    depth = flat[position].depth
    end = position + 1
    while end < len(flat) and flat[end].depth > depth:
        end += 1
    return end


def visualize_flat(flat: List[FlatNode]) -> str:
    """Render the flat list as indented text, one line per node (debug aid)."""
    lines = []
    for entry in flat:
        indent = "  " * entry.depth
        parent_info = f" (parent: {entry.parent_id})" if entry.parent_id else " (root)"
        lines.append(f"{indent}<{entry.tag}>{parent_info}")
    return "\n".join(lines)


def verify_flat(flat: List[FlatNode]) -> None:
    """Raise :class:`TreeInvariantError` if ``flat`` breaks any list invariant.

    Checks chain/depth/parent agreement, acyclicity, pre-order placement,
    contiguous sibling order and the ``has_children`` flags.
    """
    violations: List[str] = []
    seen: Dict[str, FlatNode] = {}
    next_order: Dict[Optional[str], int] = {}
    # ids on the path from the root to the previous entry
    path: List[str] = []

    for entry in flat:
        if entry.id in seen:
            violations.append(f"{entry.id}: duplicate id")
            continue
        if len(entry.ancestor_chain) != entry.depth:
            violations.append(
                f"{entry.id}: depth {entry.depth} but chain length {len(entry.ancestor_chain)}"
            )
        expected_parent = entry.ancestor_chain[-1] if entry.ancestor_chain else None
        if entry.parent_id != expected_parent:
            violations.append(
                f"{entry.id}: parent {entry.parent_id!r} does not end chain {entry.ancestor_chain!r}"
            )
        if entry.id in entry.ancestor_chain:
            violations.append(f"{entry.id}: appears in its own ancestor chain")
        if entry.parent_id is not None and entry.parent_id not in seen:
            violations.append(f"{entry.id}: parent {entry.parent_id!r} missing or listed later")

        del path[entry.depth:]
        if tuple(path) != entry.ancestor_chain:
            violations.append(f"{entry.id}: not in pre-order position for chain {entry.ancestor_chain!r}")
        path.append(entry.id)

        expected_order = next_order.get(entry.parent_id, 0)
        if entry.order != expected_order:
            violations.append(f"{entry.id}: order {entry.order}, expected {expected_order}")
        next_order[entry.parent_id] = expected_order + 1
        seen[entry.id] = entry

    parents = {e.parent_id for e in flat if e.parent_id is not None}
    for entry in seen.values():
        if entry.has_children != (entry.id in parents):
            violations.append(f"{entry.id}: has_children={entry.has_children} is stale")

    if violations:
        for v in violations:
            logger.debug("Invariant violation: %s", v)
        raise TreeInvariantError(
            f"Flat list breaks {len(violations)} invariant(s): {violations[0]}",
            violations=violations,
        )
