"""
Logging configuration — called once by the CLI entrypoint.

Every module logs through ``logging.getLogger(__name__)``; this
module decides where records go and how they look.

Console lines carry a short level tag::

    [WARN] Source configs/zprofile is missing or empty; ...
    [ERROR] /Users/me/.zshrc: cannot back up before writing: ...

Levels are resolved in precedence order:
    CLI flag  >  SHELLSETUP_LOG_LEVEL env var  >  WARNING (default)

Optional file output via SHELLSETUP_LOG_FILE / SHELLSETUP_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys

_TAGS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

_FMT_CONSOLE = "[%(tag)s] %(message)s"
_FMT_DEBUG = "%(asctime)s [%(tag)s] %(name)s:%(lineno)d %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class _TagFormatter(logging.Formatter):
    """Adds ``%(tag)s``: INFO / WARN / ERROR / DEBUG."""

    def format(self, record: logging.LogRecord) -> str:
        record.tag = _TAGS.get(record.levelno, record.levelname)
        return super().format(record)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file; defaults to ``level``.
    """
    numeric_level = _parse_level(level)

    if numeric_level <= logging.DEBUG:
        console_fmt = _TagFormatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG)
    else:
        console_fmt = _TagFormatter(_FMT_CONSOLE)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(console_fmt)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
