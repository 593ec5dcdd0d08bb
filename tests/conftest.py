"""Test configuration and shared fixtures for tagtree.

Provides tree builders used across the service and config test suites. All
test files should build trees through these helpers for consistency.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tagtree.config.manager import ConfigManager
from tagtree.core.models import Node, PointerSample, TargetBox

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def make_node(node_id: str, *children: Node, tag: str = None, text: str = "") -> Node:
    """Build a node whose tag defaults to the lower-cased id."""
    return Node(id=node_id, tag=tag or node_id.lower(), text=text or f"{node_id} text", children=list(children))


@pytest.fixture
def node():
    return make_node


@pytest.fixture
def sample():
    """Factory for pointer samples over a 300x32 row whose top is at ``row * 32``."""
    def factory(target_id: str, pointer_x: float, row: int = 0, padding=None):
        box = TargetBox(left=0.0, top=row * 32.0, width=300.0, height=32.0)
        return PointerSample(
            pointer_x=pointer_x,
            pointer_y=box.top + 4.0,
            target_id=target_id,
            box=box,
            content_padding=padding,
        )
    return factory


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty temp dir and reload configuration."""
    monkeypatch.setenv("TAGTREE_CONFIG_DIR", str(tmp_path))
    ConfigManager.reset()
    yield tmp_path
    ConfigManager.reset()
