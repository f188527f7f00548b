"""
Timestamped backups — ``<target>.bak-<unix-timestamp>``.

A backup is a byte-for-byte sibling copy taken before a file is
mutated. Backups are never deleted by shell-setup.
"""

from __future__ import annotations

import logging
import re
import shutil
import time
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_SUFFIXES = ("bak", "backup")

# <name>.bak-1700000000 or <name>.backup-1700000000, plus "-N" on collision
_BACKUP_RE = re.compile(r"\.(?:bak|backup)-(\d+)(?:-(\d+))?")


def backup_path_for(target: Path, suffix: str = "bak", timestamp: int | None = None) -> Path:
    """Pick a free backup path for ``target``.

    Two backups within the same second get a ``-1``, ``-2``, ... counter
    so an earlier backup is never overwritten.
    """
    if suffix not in BACKUP_SUFFIXES:
        raise ValueError(f"Unknown backup suffix {suffix!r}. Valid: {', '.join(BACKUP_SUFFIXES)}")

    ts = int(time.time()) if timestamp is None else timestamp
    candidate = target.with_name(f"{target.name}.{suffix}-{ts}")
    counter = 1
    while candidate.exists():
        candidate = target.with_name(f"{target.name}.{suffix}-{ts}-{counter}")
        counter += 1
    return candidate


def create_backup(target: Path, suffix: str = "bak", timestamp: int | None = None) -> Path:
    """Copy ``target`` to a fresh timestamped sibling.

    Returns:
        Path of the backup file.

    Raises:
        OSError: The copy failed.
    """
    backup = backup_path_for(target, suffix=suffix, timestamp=timestamp)
    shutil.copy2(target, backup)
    logger.info("Backed up %s to %s", target, backup)
    return backup


def list_backups(target: Path) -> list[Path]:
    """All backups of ``target``, oldest first."""
    if not target.parent.is_dir():
        return []
    found: list[tuple[int, int, str, Path]] = []
    for p in target.parent.iterdir():
        if not p.name.startswith(target.name + "."):
            continue
        match = _BACKUP_RE.fullmatch(p.name[len(target.name):])
        if match:
            # timestamp, then collision counter: "-10" after "-9"
            found.append((int(match.group(1)), int(match.group(2) or 0), p.name, p))
    return [p for *_, p in sorted(found)]
