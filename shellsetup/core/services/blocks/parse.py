"""
Line-level parsing of managed files.

A file is parsed once into three parts — ``before``, ``managed`` and
``after`` — each a list of lines that keep their line endings. All
rewrites are pure functions over that triple, and serialization is
plain concatenation, so untouched lines come back byte-for-byte.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from shellsetup.core.models.merge import FormatTag
from shellsetup.core.services.blocks.markers import Markers


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping terminators.

    ``"".join(split_lines(text)) == text`` always holds.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def line_text(line: str) -> str:
    """A line without its terminator (``\\n`` or ``\\r\\n``)."""
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def ensure_terminated(lines: list[str]) -> list[str]:
    """Copy of ``lines`` whose last line ends with a newline."""
    out = list(lines)
    if out and not out[-1].endswith("\n"):
        out[-1] += "\n"
    return out


def render_block(markers: Markers, content: str) -> list[str]:
    """``begin + content + end`` as lines, content newline-terminated."""
    body = ensure_terminated(split_lines(content))
    return [markers.begin + "\n", *body, markers.end + "\n"]


@dataclass
class MarkerScan:
    """Line indexes of every marker occurrence."""

    begins: list[int] = field(default_factory=list)
    ends: list[int] = field(default_factory=list)
    legacy: list[int] = field(default_factory=list)

    @property
    def well_formed(self) -> bool:
        """Exactly one begin and one end, begin first."""
        return (
            len(self.begins) == 1
            and len(self.ends) == 1
            and self.begins[0] < self.ends[0]
        )

    def summary(self) -> str:
        return (
            f"{len(self.begins)} begin, {len(self.ends)} end, "
            f"{len(self.legacy)} legacy marker(s)"
        )


def scan_markers(lines: list[str], markers: Markers) -> MarkerScan:
    """Find marker lines. A marker matches only the whole line."""
    scan = MarkerScan()
    for idx, line in enumerate(lines):
        text = line_text(line)
        if text == markers.begin:
            scan.begins.append(idx)
        elif text == markers.end:
            scan.ends.append(idx)
        elif markers.legacy is not None and text == markers.legacy:
            scan.legacy.append(idx)
    return scan


def detect_format(scan: MarkerScan) -> FormatTag:
    """Classify a file from its marker scan."""
    if not scan.begins and not scan.ends:
        if not scan.legacy:
            return FormatTag.ABSENT
        if len(scan.legacy) == 1:
            return FormatTag.LEGACY
        return FormatTag.CORRUPT
    if scan.well_formed:
        return FormatTag.PAIRED
    return FormatTag.CORRUPT


@dataclass
class ParsedFile:
    """Three-state view of a managed file.

    For ``PAIRED`` files ``begin_line``/``end_line`` hold the original
    marker lines so they are re-emitted exactly. For ``LEGACY`` files
    the legacy line sits between ``before`` and ``after`` and is
    dropped. ``ABSENT`` files are all ``before``; ``CORRUPT`` files
    keep no parts.
    """

    format: FormatTag
    scan: MarkerScan
    before: list[str] = field(default_factory=list)
    managed: list[str] = field(default_factory=list)
    after: list[str] = field(default_factory=list)
    begin_line: str | None = None
    end_line: str | None = None

    def with_content(self, markers: Markers, content: str) -> list[str]:
        """Lines of the file with its managed region set to ``content``."""
        block = render_block(markers, content)
        if self.format is FormatTag.ABSENT:
            return ensure_terminated(self.before) + block
        if self.format is FormatTag.LEGACY:
            return self.before + block + self.after
        if self.format is FormatTag.PAIRED:
            begin_line = self.begin_line or block[0]
            end_line = self.end_line or block[-1]
            return self.before + [begin_line] + block[1:-1] + [end_line] + self.after
        return block


def parse(lines: list[str], markers: Markers) -> ParsedFile:
    """Split ``lines`` into before / managed / after around the markers."""
    scan = scan_markers(lines, markers)
    fmt = detect_format(scan)

    if fmt is FormatTag.ABSENT:
        return ParsedFile(format=fmt, scan=scan, before=list(lines))

    if fmt is FormatTag.LEGACY:
        idx = scan.legacy[0]
        return ParsedFile(
            format=fmt,
            scan=scan,
            before=lines[:idx],
            after=lines[idx + 1:],
        )

    if fmt is FormatTag.PAIRED:
        b, e = scan.begins[0], scan.ends[0]
        return ParsedFile(
            format=fmt,
            scan=scan,
            before=lines[:b],
            managed=lines[b + 1:e],
            after=lines[e + 1:],
            begin_line=lines[b],
            end_line=lines[e],
        )

    return ParsedFile(format=fmt, scan=scan)
