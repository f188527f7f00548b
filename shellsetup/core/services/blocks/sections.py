"""
Section replacement — remove every marked section, append a fresh one.

Used for shell profile snippets (``.zprofile``) where the block's
position does not matter: each update relocates the section to the end
of the file. Only the section's content is preserved across updates,
not its placement.
"""

from __future__ import annotations

import logging
from pathlib import Path

from shellsetup.core.models.merge import MergeAction, MergeResult
from shellsetup.core.persistence.atomic import read_text
from shellsetup.core.persistence.backup import create_backup
from shellsetup.core.services.blocks.errors import BackupFailed, WriteFailed
from shellsetup.core.services.blocks.markers import Markers
from shellsetup.core.services.blocks.merger import stage_and_replace
from shellsetup.core.services.blocks.parse import (
    ensure_terminated,
    line_text,
    render_block,
    split_lines,
)

logger = logging.getLogger(__name__)


def strip_sections(lines: list[str], markers: Markers) -> tuple[list[str], list[str]]:
    """Drop every ``[begin, end]`` line range, inclusive.

    A begin marker without a matching end drops everything through end
    of file. A stray end marker outside any section is dropped too, so
    the appended section is always the only one.

    Returns:
        (kept lines, warnings)
    """
    kept: list[str] = []
    warnings: list[str] = []
    inside = False
    for line in lines:
        text = line_text(line)
        if inside:
            if text == markers.end:
                inside = False
            continue
        if text == markers.begin:
            inside = True
            continue
        if text == markers.end:
            warnings.append(f"Dropped stray {markers.end!r} line")
            continue
        kept.append(line)

    if inside:
        warnings.append(
            f"{markers.begin!r} had no matching {markers.end!r}; "
            "removed everything after it"
        )
    return kept, warnings


def replace_section(
    target: Path,
    begin_marker: str,
    end_marker: str,
    new_body: str,
    backup_suffix: str = "bak",
) -> MergeResult:
    """Replace the marked section of ``target`` with ``new_body``.

    The file is created if missing. An existing file is backed up before
    it changes and rewritten atomically.

    Raises:
        MergeError: Backup, validation or write failure for this file.
    """
    target = Path(target)
    markers = Markers.from_strings(begin_marker, end_marker)
    existed = target.exists()

    try:
        original = read_text(target) if existed else ""
    except OSError as e:
        raise WriteFailed(target, f"cannot read: {e}") from e

    kept, warnings = strip_sections(split_lines(original), markers)
    for message in warnings:
        logger.warning("%s: %s", target, message)

    kept = ensure_terminated(kept)
    if kept and line_text(kept[-1]).strip():
        kept.append("\n")
    new_text = "".join(kept + render_block(markers, new_body))

    result = MergeResult(
        action=MergeAction.UPDATED if existed else MergeAction.CREATED,
        target=target,
        warnings=[f"{target}: {m}" for m in warnings],
    )

    if new_text == original:
        logger.info("Section %r in %s already up to date", markers.begin, target)
        result.action = MergeAction.UNCHANGED
        return result

    if existed:
        try:
            result.backup_path = create_backup(target, suffix=backup_suffix)
        except OSError as e:
            raise BackupFailed(target, f"cannot back up before writing: {e}") from e

    stage_and_replace(target, new_text, markers)
    logger.info("Section %r written to end of %s", markers.begin, target)
    return result
