"""
Marker strings for managed blocks.

    # BEGIN shell-setup            # BEGIN shell-setup: cargo
    ...                            ...
    # END shell-setup              # END shell-setup: cargo

Older releases stamped a single ``# MANAGED BY shell-setup`` line with
no closing marker; that is the legacy marker.
"""

from __future__ import annotations

from dataclasses import dataclass

BEGIN_PREFIX = "# BEGIN "
END_PREFIX = "# END "
LEGACY_PREFIX = "# MANAGED BY "


@dataclass(frozen=True)
class Markers:
    """The sentinel lines owned by one managing tool (and subsection)."""

    begin: str
    end: str
    legacy: str | None = None

    def __post_init__(self) -> None:
        for value in (self.begin, self.end, self.legacy):
            if value is not None and ("\n" in value or "\r" in value):
                raise ValueError(f"Marker must be a single line: {value!r}")
        if not self.begin or not self.end:
            raise ValueError("Begin and end markers must be non-empty")
        if self.begin == self.end:
            raise ValueError(f"Begin and end markers must differ: {self.begin!r}")

    @classmethod
    def for_tool(cls, tool: str, subsection: str | None = None) -> Markers:
        """Build the standard markers for a tool name."""
        label = f"{tool}: {subsection}" if subsection else tool
        return cls(
            begin=BEGIN_PREFIX + label,
            end=END_PREFIX + label,
            legacy=LEGACY_PREFIX + label,
        )

    @classmethod
    def from_strings(cls, begin: str, end: str) -> Markers:
        """Wrap explicit marker strings.

        The legacy marker is derived when ``begin`` follows the
        ``# BEGIN <label>`` convention; otherwise there is none.
        """
        legacy = None
        if begin.startswith(BEGIN_PREFIX):
            legacy = LEGACY_PREFIX + begin[len(BEGIN_PREFIX):]
        return cls(begin=begin, end=end, legacy=legacy)
