"""
Manifest loader — reads shellsetup.yml into a validated Manifest.

Reads YAML, validates against the pydantic schema, and returns typed
objects. Path helpers resolve manifest paths against explicit base
and home directories, never against ambient process state.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from shellsetup.core.models.manifest import Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILE = "shellsetup.yml"


class ConfigError(Exception):
    """Raised when the manifest is missing or invalid."""


def find_manifest_file(start_dir: Path) -> Path | None:
    """Search for shellsetup.yml starting at ``start_dir``, walking up.

    Returns:
        Path to the manifest, or None if not found.
    """
    current = start_dir.resolve()

    for _ in range(20):  # safety limit
        candidate = current / MANIFEST_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Manifest not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid manifest {path}: {e}") from e

    logger.info(
        "Loaded manifest for '%s': %d package(s), %d managed target(s)",
        manifest.tool,
        len(manifest.packages),
        len(manifest.managed_targets),
    )
    return manifest


def resolve_source(base_dir: Path, value: str) -> Path:
    """A manifest source path: absolute, or relative to the manifest."""
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def resolve_target(home: Path, value: str) -> Path:
    """A manifest target path: ``~``-prefixed, absolute, or home-relative."""
    if value == "~":
        return home
    if value.startswith("~/"):
        return home / value[2:]
    path = Path(value)
    return path if path.is_absolute() else home / path
