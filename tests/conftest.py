"""Shared test configuration and fixtures for the outline toolkit.

Every test runs against an isolated user-config directory so local overrides
in the home directory never leak into results.
"""

import itertools
import logging
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from outline_toolkit.config import ConfigManager
from outline_toolkit.core.models import normalize_outline

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty temp dir and reload config per test."""
    config_dir = tmp_path / "user_config"
    config_dir.mkdir()
    monkeypatch.setenv("OUTLINE_TOOLKIT_CONFIG_DIR", str(config_dir))
    ConfigManager.reset()
    yield config_dir
    ConfigManager.reset()


@pytest.fixture
def build():
    """Build a forest from plain dicts (children/expanded optional)."""
    def factory(data):
        return normalize_outline(data)
    return factory


@pytest.fixture
def shape():
    """Reduce a forest to nested ``(id, [children...])`` tuples for assertions."""
    def to_shape(tree):
        return [(node.id, to_shape(node.children)) for node in tree]
    return to_shape


@pytest.fixture
def sequential_ids():
    """Deterministic id factory yielding n1, n2, ..."""
    counter = itertools.count(1)
    return lambda: f"n{next(counter)}"


@pytest.fixture
def sample_tree(build):
    """Two roots, three levels:

    a
      b
        e
      c
      d
    f
    """
    return build([
        {"id": "a", "text": "Root", "children": [
            {"id": "b", "text": "Child1", "children": [{"id": "e", "text": "Grandchild"}]},
            {"id": "c", "text": "Child2"},
            {"id": "d", "text": "Child3"},
        ]},
        {"id": "f", "text": "Second root"},
    ])


