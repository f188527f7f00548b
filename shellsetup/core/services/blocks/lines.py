"""
Insert-if-absent for single lines, e.g.::

    # Powerlevel10k configuration
    [[ ! -f ~/.p10k.zsh ]] || source ~/.p10k.zsh
"""

from __future__ import annotations

import logging
from pathlib import Path

from shellsetup.core.models.merge import MergeAction, MergeResult
from shellsetup.core.persistence.atomic import atomic_write_text, read_text
from shellsetup.core.persistence.backup import create_backup
from shellsetup.core.services.blocks.errors import BackupFailed, WriteFailed
from shellsetup.core.services.blocks.parse import ensure_terminated, line_text, split_lines

logger = logging.getLogger(__name__)


def ensure_line(
    target: Path,
    line: str,
    comment: str | None = None,
    backup_suffix: str = "bak",
) -> MergeResult:
    """Append ``line`` to ``target`` unless an identical line exists.

    Raises:
        ValueError: ``line`` spans more than one line.
        MergeError: Backup or write failure for this file.
    """
    if "\n" in line or "\r" in line:
        raise ValueError(f"Expected a single line, got {line!r}")

    target = Path(target)
    existed = target.exists()
    try:
        original = read_text(target) if existed else ""
    except OSError as e:
        raise WriteFailed(target, f"cannot read: {e}") from e

    lines = split_lines(original)
    if any(line_text(existing) == line for existing in lines):
        logger.info("%s already contains %r", target, line)
        return MergeResult(action=MergeAction.UNCHANGED, target=target)

    new_lines = ensure_terminated(lines)
    if new_lines and line_text(new_lines[-1]).strip():
        new_lines.append("\n")
    if comment:
        new_lines.append(f"# {comment}\n")
    new_lines.append(line + "\n")

    result = MergeResult(
        action=MergeAction.UPDATED if existed else MergeAction.CREATED,
        target=target,
    )
    if existed:
        try:
            result.backup_path = create_backup(target, suffix=backup_suffix)
        except OSError as e:
            raise BackupFailed(target, f"cannot back up before writing: {e}") from e

    try:
        atomic_write_text(target, "".join(new_lines))
    except OSError as e:
        raise WriteFailed(target, f"cannot write: {e}") from e

    logger.info("Added %r to %s", line, target)
    return result
