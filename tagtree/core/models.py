from __future__ import annotations

"""Shared data structures used across the tagtree core.

This module is intentionally free of UI / I/O code so that the contained
objects can be reused in any context (unit-tests, CLI, GUI, etc.).

Two shapes describe the same tree:

- :class:`Node` is the persisted, nested shape handed to and from callers.
- :class:`FlatNode` is the derived working shape: one entry per node in
  depth-first pre-order, annotated with depth, parent, ancestry and sibling
  order. It is never persisted on its own.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

__all__ = [
    "Node",
    "FlatNode",
    "DropIntent",
    "TargetBox",
    "PointerSample",
    "DropIndicator",
    "DragSettings",
    "InsertionKind",
    "InsertionSide",
    "nodes_from_dicts",
    "nodes_to_dicts",
]

InsertionKind = Literal["sibling", "first-child", "child"]
InsertionSide = Literal["before", "after"]


@dataclass
class Node:
    """A tagged element with text content and ordered children.

    Attributes
    ----------
    id
        Unique identifier across the whole tree.
    tag
        Element name (``section``, ``instructions``...).
    text
        Free text content of the element.
    children
        Ordered child nodes, owned exclusively by this node.
    collapsed
        Presentation flag preserved through flatten/reconstruct.
    """

    id: str
    tag: str
    text: str = ""
    children: List["Node"] = field(default_factory=list)
    collapsed: bool = False

    def has_children(self) -> bool:
        """Return True if this node has at least one child."""
        return len(self.children) > 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        """Build a node (and its subtree) from the persisted mapping.

        Accepts the legacy ``tagName`` / ``content`` keys written by older
        clients in place of ``tag`` / ``text``.
        """
        tag = data.get("tag", data.get("tagName"))
        if tag is None:
            raise ValueError(f"Element '{data.get('id')}' has no tag")
        return cls(
            id=str(data["id"]),
            tag=str(tag),
            text=str(data.get("text", data.get("content", "")) or ""),
            children=[cls.from_dict(c) for c in data.get("children") or []],
            collapsed=bool(data.get("collapsed", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the persisted mapping for this node and its subtree."""
        out: Dict[str, Any] = {
            "id": self.id,
            "tag": self.tag,
            "text": self.text,
            "children": [c.to_dict() for c in self.children],
        }
        if self.collapsed:
            out["collapsed"] = True
        return out


def nodes_from_dicts(items: List[Dict[str, Any]]) -> List[Node]:
    return [Node.from_dict(item) for item in items or []]


def nodes_to_dicts(nodes: List[Node]) -> List[Dict[str, Any]]:
    return [n.to_dict() for n in nodes]


@dataclass(frozen=True)
class FlatNode:
    """One node of the flat working list.

    ``ancestor_chain`` runs from the root down to the direct parent, so
    ``len(ancestor_chain) == depth`` and its last entry equals ``parent_id``.
    """

    id: str
    tag: str
    text: str
    depth: int
    parent_id: Optional[str]
    ancestor_chain: Tuple[str, ...]
    order: int
    has_children: bool = False
    collapsed: bool = False

    def is_descendant_of(self, node_id: str) -> bool:
        return node_id in self.ancestor_chain


@dataclass(frozen=True)
class DropIntent:
    """Where a dragged node would land if released now.

    ``target_id`` is the anchor the insertion index is computed from:

    - ``sibling`` / ``before``: immediately before the anchor
    - ``sibling`` / ``after``: immediately after the anchor's subtree
    - ``first-child``: immediately after the anchor, as its first child
    - ``child``: after the anchor's last descendant, as its last child
    """

    depth: int
    parent_id: Optional[str]
    ancestor_chain: Tuple[str, ...]
    insertion_kind: InsertionKind
    target_id: str
    position: InsertionSide = "before"


@dataclass(frozen=True)
class TargetBox:
    """On-screen box of the node under the pointer."""

    left: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class PointerSample:
    """A single pointer-move tick delivered by the presentation layer.

    ``content_padding`` is the horizontal padding between the row's left edge
    and depth-0 content; None means "use the configured default".
    """

    pointer_x: float
    pointer_y: float
    target_id: str
    box: TargetBox
    content_padding: Optional[float] = None


@dataclass(frozen=True)
class DropIndicator:
    """Preview line geometry for a resolved drop intent."""

    intent: DropIntent
    x: float
    y: float
    width: float

    @property
    def depth(self) -> int:
        return self.intent.depth


@dataclass(frozen=True)
class DragSettings:
    """Geometry settings used to map pointer offsets to depths."""

    indent_unit: float = 24.0
    content_padding: float = 12.0
    end_sentinel_id: str = "__end__"
    child_indicator_ratio: float = 0.75

    def __post_init__(self):
        if self.indent_unit <= 0:
            raise ValueError("indent_unit must be positive")

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "DragSettings":
        """Create settings from a configuration section, ignoring unknown keys."""
        data = data or {}
        defaults = cls()
        return cls(
            indent_unit=float(data.get("indent_unit", defaults.indent_unit)),
            content_padding=float(data.get("content_padding", defaults.content_padding)),
            end_sentinel_id=str(data.get("end_sentinel_id", defaults.end_sentinel_id)),
            child_indicator_ratio=float(
                data.get("child_indicator_ratio", defaults.child_indicator_ratio)
            ),
        )
