"""Top-level package for the tagtree element tree core.

Front-ends (editor UI, API handlers) should only depend on the public API
exposed here rather than importing internal modules directly.
"""

from .core.models import Node, FlatNode, DropIntent  # re-export for convenience
from .core.services import DragDropService, flatten, reconstruct

__all__: list[str] = [
    "Node",
    "FlatNode",
    "DropIntent",
    "DragDropService",
    "flatten",
    "reconstruct",
]
