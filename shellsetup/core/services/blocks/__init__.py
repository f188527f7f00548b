"""
Managed blocks — marker-delimited regions inside user-owned files.

Public API:

    from shellsetup.core.services.blocks import (
        ensure_managed_block,   # in-place merge with legacy migration
        replace_section,        # remove-then-append section
        ensure_line,            # insert-if-absent
        inspect_file,           # format detection for reporting
    )
"""

from __future__ import annotations

from pathlib import Path

from shellsetup.core.models.merge import FormatTag
from shellsetup.core.persistence.atomic import read_text
from shellsetup.core.services.blocks.errors import (
    BackupFailed,
    MergeError,
    MigrationFailed,
    ValidationFailed,
    WriteFailed,
)
from shellsetup.core.services.blocks.lines import ensure_line
from shellsetup.core.services.blocks.markers import Markers
from shellsetup.core.services.blocks.merger import (
    apply_managed_block,
    ensure_managed_block,
    read_source,
)
from shellsetup.core.services.blocks.parse import MarkerScan, parse, split_lines
from shellsetup.core.services.blocks.sections import replace_section


def inspect_file(target: Path, markers: Markers) -> tuple[FormatTag | None, MarkerScan]:
    """Marker layout of ``target`` (format is None when the file is missing)."""
    if not target.is_file():
        return None, MarkerScan()
    parsed = parse(split_lines(read_text(target)), markers)
    return parsed.format, parsed.scan


__all__ = [
    "BackupFailed",
    "Markers",
    "MergeError",
    "MigrationFailed",
    "ValidationFailed",
    "WriteFailed",
    "apply_managed_block",
    "ensure_line",
    "ensure_managed_block",
    "inspect_file",
    "read_source",
    "replace_section",
]
