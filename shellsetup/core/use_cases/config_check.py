"""
Config check use case — validate shellsetup.yml and report issues.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from shellsetup.core.config.loader import ConfigError, load_manifest, resolve_source
from shellsetup.core.models.manifest import Manifest


@dataclass
class ManifestCheckResult:
    """Result of manifest validation."""

    valid: bool = False
    manifest: Manifest | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "tool": self.manifest.tool if self.manifest else None,
            "package_count": len(self.manifest.packages) if self.manifest else 0,
            "tool_count": len(self.manifest.tools) if self.manifest else 0,
            "target_count": len(self.manifest.managed_targets) if self.manifest else 0,
        }


def check_manifest(config_path: Path | None) -> ManifestCheckResult:
    """Validate a manifest and report semantic issues.

    Errors: unreadable/invalid manifest, the same marker pair managed
    twice in one target. Warnings: missing sources, nothing to do.
    """
    result = ManifestCheckResult(config_path=config_path)

    if config_path is None:
        result.errors.append("No shellsetup.yml found.")
        return result

    try:
        manifest = load_manifest(config_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.manifest = manifest

    base_dir = config_path.parent

    if not (manifest.packages or manifest.tools or manifest.managed_targets or manifest.directories):
        result.warnings.append("Manifest declares no packages, no tools and no files to manage.")

    # Same target + same markers twice would fight over one block
    seen: set[tuple[str, str, str | None]] = set()
    for kind, items in (("block", manifest.blocks), ("section", manifest.sections)):
        for item in items:
            key = (item.target, item.tool or manifest.tool, item.subsection)
            if key in seen:
                label = f"{key[1]}: {key[2]}" if key[2] else key[1]
                result.errors.append(f"Duplicate managed {kind} '{label}' in {item.target}")
            seen.add(key)

    names = [p.name for p in manifest.packages]
    dupes = {n for n in names if names.count(n) > 1}
    if dupes:
        result.warnings.append(f"Duplicate packages: {', '.join(sorted(dupes))}")

    tool_names = [t.name for t in manifest.tools]
    dupes = {n for n in tool_names if tool_names.count(n) > 1}
    if dupes:
        result.warnings.append(f"Duplicate tools: {', '.join(sorted(dupes))}")

    sources = [b.source for b in manifest.blocks]
    sources += [s.source for s in manifest.sections if s.source is not None]
    sources += [f.source for f in manifest.files]
    for source in sources:
        if not resolve_source(base_dir, source).is_file():
            result.warnings.append(f"Source file does not exist: {source}")
    for directory in manifest.directories:
        if not resolve_source(base_dir, directory.source).is_dir():
            result.warnings.append(f"Source directory does not exist: {directory.source}")

    result.valid = len(result.errors) == 0
    return result
