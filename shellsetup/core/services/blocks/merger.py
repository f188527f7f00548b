"""
Managed block merger — keep one marker-delimited block current.

Given a target config file, source-of-truth content and a marker pair,
make the target contain exactly one ``begin + content + end`` block
while leaving everything outside the markers alone:

    absent     →  block appended at end-of-file           (UPDATED)
    legacy     →  ``# MANAGED BY`` line replaced in place  (MIGRATED)
    paired     →  lines between the markers replaced      (UPDATED)
    corrupt    →  whole file replaced by a fresh block    (UPDATED + warning)
    no target  →  file created with just the block        (CREATED)

An existing target is always backed up first. The new content is
staged next to the target, re-scanned, and only then renamed over it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from shellsetup.core.models.merge import FormatTag, MergeAction, MergeResult
from shellsetup.core.persistence.atomic import atomic_write_text, read_text
from shellsetup.core.persistence.backup import create_backup
from shellsetup.core.services.blocks.errors import (
    BackupFailed,
    MergeError,
    MigrationFailed,
    ValidationFailed,
    WriteFailed,
)
from shellsetup.core.services.blocks.markers import Markers
from shellsetup.core.services.blocks.parse import (
    parse,
    render_block,
    scan_markers,
    split_lines,
)

logger = logging.getLogger(__name__)


def ensure_managed_block(
    target: Path,
    source: Path,
    begin_marker: str,
    end_marker: str,
    backup_suffix: str = "bak",
) -> MergeResult:
    """Sync the managed block in ``target`` with the file ``source``.

    A missing, unreadable or empty source skips the target (with a
    warning) and leaves it untouched.

    Raises:
        MergeError: A fatal failure for this target; see ``errors``.
    """
    target = Path(target)
    markers = Markers.from_strings(begin_marker, end_marker)

    content = read_source(Path(source))
    if content is None:
        return _skipped(target, f"Source {source} is missing or empty; {target} left untouched")

    return apply_managed_block(target, content, markers, backup_suffix=backup_suffix)


def apply_managed_block(
    target: Path,
    content: str,
    markers: Markers,
    backup_suffix: str = "bak",
) -> MergeResult:
    """Sync the managed block in ``target`` with ``content``.

    Raises:
        BackupFailed: The existing target could not be backed up.
        MigrationFailed: Legacy-marker rewrite produced unusable output.
        ValidationFailed: The content holds a marker line, or the staged
            file failed the marker re-scan.
        WriteFailed: Staging or renaming failed.
    """
    target = Path(target)

    if not content.strip():
        return _skipped(target, f"Source content for {target} is empty; left untouched")

    _check_content(target, content, markers)

    if not target.exists():
        new_text = "".join(render_block(markers, content))
        stage_and_replace(target, new_text, markers)
        logger.info("Created %s with managed block %r", target, markers.begin)
        return MergeResult(action=MergeAction.CREATED, target=target)

    try:
        backup_path = create_backup(target, suffix=backup_suffix)
    except OSError as e:
        raise BackupFailed(target, f"cannot back up before writing: {e}") from e

    try:
        original = read_text(target)
    except OSError as e:
        raise WriteFailed(target, f"cannot read: {e}") from e

    parsed = parse(split_lines(original), markers)
    result = MergeResult(
        action=MergeAction.UPDATED,
        target=target,
        format=parsed.format,
        backup_path=backup_path,
    )

    if parsed.format is FormatTag.CORRUPT:
        message = (
            f"{target} has a corrupt managed block ({parsed.scan.summary()}); "
            f"discarding its previous content and writing a fresh block. "
            f"Previous content saved in {backup_path}"
        )
        logger.warning(message)
        result.warnings.append(message)

    new_text = "".join(parsed.with_content(markers, content))

    if parsed.format is FormatTag.LEGACY:
        _check_migration(target, new_text, markers)
        result.action = MergeAction.MIGRATED

    if new_text == original:
        logger.info("%s already up to date", target)
        result.action = MergeAction.UNCHANGED
        return result

    stage_and_replace(target, new_text, markers)
    logger.info("%s %s (was %s)", result.action.value.capitalize(), target, parsed.format.value)
    return result


def stage_and_replace(target: Path, new_text: str, markers: Markers) -> None:
    """Atomically replace ``target``, rejecting a malformed staged file.

    Raises:
        ValidationFailed: The staged file does not hold exactly one
            begin marker followed by one end marker.
        WriteFailed: Any I/O failure while staging or renaming.
    """

    def _validate(staged: str) -> None:
        scan = scan_markers(split_lines(staged), markers)
        if not scan.well_formed:
            raise ValidationFailed(
                target,
                f"staged content has {scan.summary()}; expected one "
                f"{markers.begin!r} before one {markers.end!r}",
            )

    try:
        atomic_write_text(target, new_text, validator=_validate)
    except MergeError:
        raise
    except OSError as e:
        raise WriteFailed(target, f"cannot write: {e}") from e


def read_source(source: Path) -> str | None:
    """Content of a source-of-truth file, or None if missing/empty."""
    if not source.is_file():
        return None
    try:
        content = read_text(source)
    except OSError as e:
        logger.warning("Cannot read source %s: %s", source, e)
        return None
    if not content.strip():
        return None
    return content


def _check_content(target: Path, content: str, markers: Markers) -> None:
    # Rejected before any backup, whatever the target format
    scan = scan_markers(split_lines(content), markers)
    if scan.begins or scan.ends or scan.legacy:
        raise ValidationFailed(
            target,
            f"source content holds marker line(s) ({scan.summary()}); "
            f"{target} left untouched",
        )


def _check_migration(target: Path, new_text: str, markers: Markers) -> None:
    if not new_text.strip():
        raise MigrationFailed(target, "legacy marker rewrite produced empty output")


def _skipped(target: Path, message: str) -> MergeResult:
    logger.warning(message)
    return MergeResult(action=MergeAction.SKIPPED, target=target, warnings=[message])
