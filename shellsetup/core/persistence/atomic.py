"""
Atomic text I/O for user-owned config files.

Writes go to a temp file in the target's directory and are renamed
over the target only after they are complete (and, optionally,
validated). A crash or a failed validation leaves the target exactly
as it was; the only thing that can ever be half-written is the temp
file, which is removed on failure.

Text is decoded as UTF-8 with ``surrogateescape`` and without newline
translation, so files in any encoding round-trip byte-for-byte.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"

# Temp files are hidden siblings of the target
TEMP_PREFIX = ".shellsetup_"
TEMP_SUFFIX = ".tmp"

DEFAULT_FILE_MODE = 0o644


def read_text(path: Path) -> str:
    """Read a file as text, preserving every byte and line ending."""
    return path.read_bytes().decode(TEXT_ENCODING, TEXT_ERRORS)


def atomic_write_text(
    path: Path,
    content: str,
    validator: Callable[[str], None] | None = None,
) -> None:
    """Replace ``path`` with ``content`` via temp-file-then-rename.

    Args:
        path: Target file. Parent directories are created as needed.
        content: Full new file content.
        validator: Optional check run against the staged file's content
            (read back from disk) before the rename. It signals rejection
            by raising; the staged file is then discarded and the
            exception propagates.

    Raises:
        OSError: The temp file could not be written or renamed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    data = content.encode(TEXT_ENCODING, TEXT_ERRORS)

    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=TEMP_PREFIX,
        suffix=TEMP_SUFFIX,
    )
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp, mode)

        if validator is not None:
            validator(read_text(tmp))

        os.replace(tmp, path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d bytes to %s", len(data), path)


def _target_mode(path: Path) -> int:
    """Permission bits for the new file: keep the existing file's."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return DEFAULT_FILE_MODE
