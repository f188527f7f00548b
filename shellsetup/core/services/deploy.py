"""
File deployment — copy project config files into place.

Whole-file configs (helix ``config.toml``, ``.tmux.conf``, scripts)
are owned entirely by the project, so they are copied over rather
than merged. An existing destination is backed up first, unless the
manifest entry asks to preserve it (``.p10k.zsh`` is the user's once created).
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path

from shellsetup.core.models.merge import MergeAction, MergeResult
from shellsetup.core.persistence.atomic import atomic_write_text, read_text
from shellsetup.core.persistence.backup import create_backup
from shellsetup.core.services.blocks.errors import BackupFailed, WriteFailed

logger = logging.getLogger(__name__)

_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def deploy_file(
    source: Path,
    dest: Path,
    preserve_existing: bool = False,
    make_executable: bool = False,
    backup_suffix: str = "bak",
) -> MergeResult:
    """Copy ``source`` to ``dest``.

    Args:
        source: Project file to deploy.
        dest: Destination path; parent directories are created.
        preserve_existing: Leave an existing ``dest`` untouched.
        make_executable: Add execute bits when the file has a shebang.
        backup_suffix: ``bak`` or ``backup``.

    Raises:
        MergeError: Backup or write failure for this file.
    """
    source, dest = Path(source), Path(dest)

    if not source.is_file():
        message = f"Source {source} not found; skipping {dest}"
        logger.warning(message)
        return MergeResult(action=MergeAction.SKIPPED, target=dest, warnings=[message])

    existed = dest.exists()
    if existed and preserve_existing:
        logger.info("Preserving existing %s", dest)
        return MergeResult(action=MergeAction.UNCHANGED, target=dest)

    try:
        content = read_text(source)
        current = read_text(dest) if existed else None
    except OSError as e:
        raise WriteFailed(dest, f"cannot read: {e}") from e

    result = MergeResult(
        action=MergeAction.UPDATED if existed else MergeAction.CREATED,
        target=dest,
    )

    if current == content:
        result.action = MergeAction.UNCHANGED
    else:
        if existed:
            try:
                result.backup_path = create_backup(dest, suffix=backup_suffix)
            except OSError as e:
                raise BackupFailed(dest, f"cannot back up before writing: {e}") from e
        try:
            atomic_write_text(dest, content)
        except OSError as e:
            raise WriteFailed(dest, f"cannot write: {e}") from e
        logger.info("Deployed %s to %s", source, dest)

    if make_executable and content.startswith("#!"):
        mode = dest.stat().st_mode
        if mode & _EXEC_BITS != _EXEC_BITS:
            dest.chmod(mode | _EXEC_BITS)

    return result


def deployable_files(source_dir: Path) -> list[Path]:
    """Regular files directly under ``source_dir``, sorted by name.

    Subdirectories are not descended into. A missing directory has no
    deployable files.
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        return []
    return sorted(p for p in source_dir.iterdir() if p.is_file())
