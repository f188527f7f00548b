"""
Manifest model — what a shell-setup run installs and manages.

Loaded from shellsetup.yml. Source paths are relative to the manifest
directory; target paths may start with ``~`` and are resolved against
an explicit home directory by the apply use case.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class PackageSpec(BaseModel):
    """A Homebrew formula or cask."""

    name: str
    cask: bool = False
    description: str = ""


class ToolSpec(BaseModel):
    """A tool installed by its own command, skipped when already on PATH.

    ``check`` names the executable to look for; it defaults to ``name``
    (``taplo`` for the ``taplo-cli`` crate, for instance).
    """

    name: str
    command: str
    check: str | None = None
    description: str = ""


class BlockSpec(BaseModel):
    """A managed block kept inside a user-owned config file."""

    target: str
    source: str
    tool: str | None = None         # overrides Manifest.tool for the markers
    subsection: str | None = None


class SectionSpec(BaseModel):
    """A marker-delimited section that is always relocated to end-of-file."""

    target: str
    source: str | None = None
    body: str | None = None
    tool: str | None = None
    subsection: str | None = None

    @model_validator(mode="after")
    def _one_content_source(self) -> SectionSpec:
        if (self.source is None) == (self.body is None):
            raise ValueError("section needs exactly one of 'source' or 'body'")
        return self


class LineSpec(BaseModel):
    """A single line that must be present in a file."""

    target: str
    line: str
    comment: str | None = None


class FileSpec(BaseModel):
    """A whole file copied from the project into place."""

    source: str
    target: str
    preserve_existing: bool = False  # keep the user's copy if one exists
    make_executable: bool = False


class DirectorySpec(BaseModel):
    """Every regular file of a project directory copied into place."""

    source: str
    target: str
    make_executable: bool = True


class Manifest(BaseModel):
    """Root of shellsetup.yml."""

    tool: str = "shell-setup"
    backup_suffix: Literal["bak", "backup"] = "bak"

    taps: list[str] = Field(default_factory=list)
    packages: list[PackageSpec] = Field(default_factory=list)
    tools: list[ToolSpec] = Field(default_factory=list)

    blocks: list[BlockSpec] = Field(default_factory=list)
    sections: list[SectionSpec] = Field(default_factory=list)
    lines: list[LineSpec] = Field(default_factory=list)
    files: list[FileSpec] = Field(default_factory=list)
    directories: list[DirectorySpec] = Field(default_factory=list)

    @field_validator("packages", mode="before")
    @classmethod
    def _expand_package_names(cls, value: Any) -> Any:
        # Plain strings are shorthand for formulae: "- tmux"
        if isinstance(value, list):
            return [{"name": v} if isinstance(v, str) else v for v in value]
        return value

    @property
    def managed_targets(self) -> list[str]:
        """Every target path the manifest writes, in declaration order."""
        targets: list[str] = []
        for group in (self.blocks, self.sections, self.lines, self.files):
            targets.extend(item.target for item in group)
        return targets
