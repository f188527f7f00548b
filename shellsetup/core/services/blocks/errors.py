"""
Managed-file errors.

Only failures that must stop work on a file are exceptions. A missing
source or a corrupt marker layout is reported as a warning on the
``MergeResult`` instead, and the run carries on.
"""

from __future__ import annotations

from pathlib import Path


class MergeError(Exception):
    """A fatal failure for one target file. Other files are unaffected."""

    kind = "merge_failed"

    def __init__(self, target: Path, message: str):
        super().__init__(f"{target}: {message}")
        self.target = target
        self.message = message


class BackupFailed(MergeError):
    """The pre-write backup could not be taken; nothing was mutated."""

    kind = "backup_failed"


class MigrationFailed(MergeError):
    """Rewriting a legacy-marker file produced unusable output."""

    kind = "migration_failed"


class ValidationFailed(MergeError):
    """The staged file had the wrong marker layout and was discarded."""

    kind = "validation_failed"


class WriteFailed(MergeError):
    """Staging or renaming the new content failed; the target is intact."""

    kind = "write_failed"
