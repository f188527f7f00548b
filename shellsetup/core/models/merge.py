"""
Merge models — outcome of a managed-file operation.

Every file operation (managed block, section, line, file deploy)
reports one ``MergeResult``. Fatal failures are exceptions, not
results; see ``shellsetup.core.services.blocks.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class MergeAction(str, Enum):
    """What happened to the target file."""

    CREATED = "created"
    UPDATED = "updated"
    MIGRATED = "migrated"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"


class FormatTag(str, Enum):
    """Marker layout found in a target file before the merge."""

    ABSENT = "absent"
    LEGACY = "legacy-single-marker"
    PAIRED = "paired-marker"
    CORRUPT = "corrupt"


@dataclass
class MergeResult:
    """Outcome of one operation on one target file."""

    action: MergeAction
    target: Path
    format: FormatTag | None = None
    backup_path: Path | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Whether the target file's content was written."""
        return self.action in (
            MergeAction.CREATED,
            MergeAction.UPDATED,
            MergeAction.MIGRATED,
        )

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "target": str(self.target),
            "format": self.format.value if self.format else None,
            "backup_path": str(self.backup_path) if self.backup_path else None,
            "warnings": self.warnings,
        }
