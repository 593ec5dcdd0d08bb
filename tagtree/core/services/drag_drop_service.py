from __future__ import annotations

"""Service layer driving one drag-and-drop gesture over an element tree.

This module provides a UI-agnostic, testable controller for the gesture
lifecycle. The presentation layer calls :meth:`DragDropService.begin` when a
drag starts, :meth:`DragDropService.hover` on every pointer-move tick,
then either :meth:`DragDropService.drop` or :meth:`DragDropService.cancel`.

Scope and guarantees:
- Operates purely in-memory on ``Node`` sequences, no file I/O nor UI imports.
- The caller's tree is never mutated; a committed drop returns a new tree in
  ``OperationResult.details["nodes"]``.
- Illegal or missing drop targets return OperationResult(success=False, ...)
  with clear messaging. Broken tree invariants raise :class:`TreeError`.

Examples
--------
Basic usage:

    service = DragDropService()
    service.begin(nodes, "c")
    service.hover(PointerSample(40, 10, "b", TargetBox(0, 0, 300, 32)))
    result = service.drop()
    if result.success:
        nodes = result.details["nodes"]

"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Literal, Optional

from tagtree.core.exceptions import TreeError
from tagtree.core.models import DragSettings, DropIndicator, FlatNode, Node, PointerSample
from tagtree.core.services.drop_resolver import DropResolver
from tagtree.core.services.move_validator import move_rejection_reason
from tagtree.core.services.subtree_relocator import calculate_new_position, relocate
from tagtree.core.services.tree_codec import flatten, index_positions, reconstruct, verify_flat

__all__ = ["OperationResult", "DragDropService"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    success
        Whether the operation completed successfully.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


class DragDropService:
    """Holds the state of the single active drag gesture.

    Parameters
    ----------
    settings : DragSettings, optional
        Pointer geometry settings. Loaded from the ``drag`` configuration
        section when omitted.

    Notes
    -----
    The flat list and its id-to-position index are built once in
    :meth:`begin`, so each :meth:`hover` tick only inspects the hovered row,
    its predecessor and their ancestor chains.
    """

    def __init__(self, settings: Optional[DragSettings] = None) -> None:
        if settings is None:
            from tagtree.config import ConfigManager
            settings = ConfigManager().get_drag_settings()
        self._resolver = DropResolver(settings)
        self._flat: List[FlatNode] = []
        self._index: Dict[str, int] = {}
        self._active_id: Optional[str] = None
        self._indicator: Optional[DropIndicator] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> DragSettings:
        return self._resolver.settings

    @property
    def is_dragging(self) -> bool:
        return self._active_id is not None

    @property
    def active_id(self) -> Optional[str]:
        return self._active_id

    @property
    def dragged_node(self) -> Optional[FlatNode]:
        if self._active_id is None:
            return None
        return self._flat[self._index[self._active_id]]

    @property
    def flat_nodes(self) -> List[FlatNode]:
        """Flat list of the tree being dragged over (empty when idle)."""
        return list(self._flat)

    @property
    def current_indicator(self) -> Optional[DropIndicator]:
        return self._indicator

    # -------------------------------------------------------------------------
    # Gesture lifecycle
    # -------------------------------------------------------------------------

    def begin(self, nodes: List[Node], dragged_id: str) -> OperationResult:
        """Start dragging ``dragged_id`` over the tree ``nodes``."""
        if self._active_id is not None:
            logger.warning("Drag restarted while %s was still active; discarding it", self._active_id)
            self.cancel()

        flat = flatten(nodes)
        index = index_positions(flat)
        if dragged_id not in index:
            logger.warning("Edit FAIL: drag_start element_not_found element=%s", dragged_id)
            return OperationResult(False, f"Element not found for id '{dragged_id}'.", {"element_id": dragged_id})

        self._flat = flat
        self._index = index
        self._active_id = dragged_id
        self._indicator = None
        logger.info("Edit: drag_start element=%s nodes=%d", dragged_id, len(flat))
        return OperationResult(True, "Drag started.", {"element_id": dragged_id})

    def hover(self, sample: PointerSample) -> Optional[DropIndicator]:
        """Resolve one pointer tick into a preview indicator, or None if not droppable."""
        if self._active_id is None:
            return None
        self._indicator = self._resolver.preview(self._flat, self._active_id, sample, self._index)
        return self._indicator

    def cancel(self) -> None:
        """Abort the gesture and discard any pending drop intent."""
        if self._active_id is not None:
            logger.info("Edit noop: drag_cancel element=%s", self._active_id)
        self._reset()

    def drop(self) -> OperationResult:
        """Commit the current drop intent and return the restructured tree.

        The gesture ends whatever the outcome. Raises :class:`TreeError` only
        when the relocated list breaks tree invariants.
        """
        dragged_id = self._active_id
        indicator = self._indicator
        flat = self._flat
        self._reset()

        if dragged_id is None:
            return OperationResult(False, "No drag in progress.", {"reason": "idle"})
        if indicator is None:
            logger.info("Edit noop: drop element=%s no_valid_target", dragged_id)
            return OperationResult(False, "No valid drop target.", {"element_id": dragged_id})

        intent = indicator.intent
        logger.info(
            "Edit: drop element=%s anchor=%s kind=%s depth=%d parent=%s",
            dragged_id, intent.target_id, intent.insertion_kind, intent.depth, intent.parent_id,
        )
        try:
            new_flat = relocate(flat, dragged_id, intent)
            verify_flat(new_flat)
            nodes = reconstruct(new_flat)
        except TreeError as exc:
            logger.error("Edit FAIL: drop element=%s error=%s", dragged_id, exc, exc_info=True)
            raise

        logger.info("Edit OK: drop element=%s depth=%d parent=%s", dragged_id, intent.depth, intent.parent_id)
        return OperationResult(
            True,
            "Moved element.",
            {"nodes": nodes, "element_id": dragged_id, "intent": intent},
        )

    # -------------------------------------------------------------------------
    # Helpers for callers
    # -------------------------------------------------------------------------

    def can_drop(self, target_id: str) -> bool:
        """Return True if the active drag may be dropped next to ``target_id``."""
        if self._active_id is None:
            return False
        if target_id == self.settings.end_sentinel_id:
            return True
        return move_rejection_reason(self._flat, self._active_id, target_id, self._index) is None

    def move_element(
        self,
        nodes: List[Node],
        dragged_id: str,
        target_id: str,
        drop_type: Literal["before", "after", "child"],
    ) -> OperationResult:
        """Move an element relative to a target without a pointer gesture.

        ``before`` / ``after`` place the element as a sibling of the target,
        ``child`` appends it as the target's last child.
        """
        logger.info("Edit: move_element element=%s target=%s type=%s", dragged_id, target_id, drop_type)
        if drop_type not in ("before", "after", "child"):
            return OperationResult(False, f"Unsupported drop type '{drop_type}'.", {"allowed": ["before", "after", "child"]})

        flat = flatten(nodes)
        index = index_positions(flat)
        reason = move_rejection_reason(flat, dragged_id, target_id, index)
        if reason is not None:
            logger.info("Edit noop: move_element element=%s target=%s reason=%s", dragged_id, target_id, reason)
            return OperationResult(False, f"Cannot move: {reason}.", {"element_id": dragged_id, "target_id": target_id})

        intent = calculate_new_position(flat, target_id, drop_type, index)
        new_flat = relocate(flat, dragged_id, intent)
        verify_flat(new_flat)
        result = OperationResult(
            True,
            "Moved element.",
            {"nodes": reconstruct(new_flat), "element_id": dragged_id, "intent": intent},
        )
        logger.info("Edit OK: move_element element=%s target=%s type=%s", dragged_id, target_id, drop_type)
        return result

    def _reset(self) -> None:
        self._flat = []
        self._index = {}
        self._active_id = None
        self._indicator = None
