"""
Global Pytest Configuration and Fixtures.

Puts the project root on sys.path and provides the shared fixture tree
used by the model, deletion and navigation tests.
"""

import io
import os
import sys
from pathlib import Path

import pytest
from rich.console import Console

_ROOT_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _ROOT_PATH not in sys.path:
    sys.path.insert(0, _ROOT_PATH)

from console_ui import ConsoleUI  # noqa: E402
from file_tree import TreeBuilder  # noqa: E402


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """Create root/{a (100 B), b (200 B), c/d (300 B)}."""
    root = tmp_path / "root"
    root.mkdir()
    (root / "a").write_bytes(b"x" * 100)
    (root / "b").write_bytes(b"x" * 200)
    (root / "c").mkdir()
    (root / "c" / "d").write_bytes(b"x" * 300)
    return root


@pytest.fixture
def sample_tree(sample_dir: Path):
    """The sample directory built with directory self sizes ignored."""
    return TreeBuilder(count_directory_size=False).build(str(sample_dir))


@pytest.fixture
def console_output():
    """A ConsoleUI writing into a buffer, and the buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, force_terminal=False, color_system=None, highlight=False)
    return ConsoleUI(console=console), buffer
