import os
import sys

import pytest

# Ensure project root is importable when running pytest from repository root
_THIS_DIR = os.path.dirname(__file__)
_REPO_ROOT = os.path.abspath(os.path.join(_THIS_DIR, "..", "..", ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from tagtree.core.models import DragSettings, Node
from tagtree.core.services.drag_drop_service import DragDropService


def _n(node_id, *children, tag=None, text=None):
    return Node(id=node_id, tag=tag or node_id.lower(), text=text if text is not None else node_id, children=list(children))


@pytest.fixture
def simple_tree():
    """A[B, C]."""
    return [_n("A", _n("B"), _n("C"))]


@pytest.fixture
def chain_tree():
    """A[B[C]]."""
    return [_n("A", _n("B", _n("C")))]


@pytest.fixture
def document_tree():
    """A realistic prompt document.

    doc
      intro
      rules
        rule1
        rule2
          example
      outro
    footer
    """
    return [
        _n(
            "doc",
            _n("intro"),
            _n("rules", _n("rule1"), _n("rule2", _n("example"))),
            _n("outro"),
            tag="document",
        ),
        _n("footer"),
    ]


@pytest.fixture
def boundary_tree():
    """R[X[Y[P]], T], D -- P (depth 3) is displayed right above T (depth 1)."""
    return [_n("R", _n("X", _n("Y", _n("P"))), _n("T")), _n("D")]


@pytest.fixture
def settings():
    return DragSettings(indent_unit=24, content_padding=12, end_sentinel_id="__end__")


@pytest.fixture
def drag_service(settings):
    return DragDropService(settings=settings)
