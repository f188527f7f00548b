"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from shellsetup.core.services.blocks import Markers


@pytest.fixture
def markers() -> Markers:
    """Markers for a tool named 't': ``# BEGIN t`` / ``# END t``."""
    return Markers.for_tool("t")


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """A source-of-truth file holding ``new\\n``."""
    source = tmp_path / "source.txt"
    source.write_bytes(b"new\n")
    return source


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    """A stand-in home directory for '~' targets."""
    home = tmp_path / "home"
    home.mkdir()
    return home
