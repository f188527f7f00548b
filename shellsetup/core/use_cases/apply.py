"""
Apply use case — run every step of a manifest.

Order: taps, packages and tools, then managed blocks, sections, lines, whole
files and script directories. Each file step is independent: a fatal
error on one target is recorded and the next step still runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from shellsetup.adapters.registry import AdapterRegistry
from shellsetup.core.config.loader import resolve_source, resolve_target
from shellsetup.core.models.manifest import Manifest
from shellsetup.core.models.merge import MergeAction, MergeResult
from shellsetup.core.services.blocks import (
    Markers,
    MergeError,
    ensure_line,
    ensure_managed_block,
    read_source,
    replace_section,
)
from shellsetup.core.services.deploy import deploy_file, deployable_files
from shellsetup.core.services.install import InstallReport, install_packages

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Outcome of one manifest step."""

    kind: str                       # package, tool, block, section, line, file
    target: str
    status: str = "ok"              # ok, skipped, failed
    action: str | None = None       # MergeAction value for file steps
    error: str | None = None
    error_kind: str | None = None
    backup_path: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def from_merge(cls, kind: str, result: MergeResult) -> StepResult:
        return cls(
            kind=kind,
            target=str(result.target),
            status="skipped" if result.action is MergeAction.SKIPPED else "ok",
            action=result.action.value,
            backup_path=str(result.backup_path) if result.backup_path else None,
            warnings=list(result.warnings),
        )

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "target": self.target,
            "status": self.status,
            "action": self.action,
            "error": self.error,
            "error_kind": self.error_kind,
            "backup_path": self.backup_path,
            "warnings": self.warnings,
        }


@dataclass
class ApplyReport:
    """Outcome of a whole manifest run."""

    steps: list[StepResult] = field(default_factory=list)
    install: InstallReport | None = None

    @property
    def total(self) -> int:
        return len(self.steps)

    @property
    def failed(self) -> int:
        return sum(1 for s in self.steps if s.failed)

    @property
    def succeeded(self) -> int:
        return sum(1 for s in self.steps if s.ok)

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.failed == self.total:
            return "failed"
        return "partial"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "steps": [s.to_dict() for s in self.steps],
            "install": self.install.to_dict() if self.install else None,
        }


def apply_manifest(
    manifest: Manifest,
    base_dir: Path,
    home: Path,
    registry: AdapterRegistry | None = None,
    install: bool = True,
    dry_run: bool = False,
) -> ApplyReport:
    """Run a manifest.

    Args:
        manifest: The validated manifest.
        base_dir: Directory source paths are relative to.
        home: Directory ``~`` targets resolve against.
        registry: Adapter registry for package installs. Required when
            ``install`` is True and the manifest lists packages or taps.
        install: Run the package steps.
        dry_run: Report what would run without touching anything.

    Returns:
        ApplyReport with one StepResult per package and file.
    """
    report = ApplyReport()
    suffix = manifest.backup_suffix

    if install and (manifest.packages or manifest.taps or manifest.tools):
        if registry is None:
            raise ValueError("An adapter registry is required to install packages")
        report.install = install_packages(
            registry,
            manifest.packages,
            taps=manifest.taps,
            tools=manifest.tools,
            dry_run=dry_run,
        )
        tool_names = {tool.name for tool in manifest.tools}

        def kind_of(name: str) -> str:
            return "tool" if name in tool_names else "package"

        for name in report.install.installed:
            report.steps.append(StepResult(kind=kind_of(name), target=name))
        for name in report.install.skipped:
            report.steps.append(StepResult(kind=kind_of(name), target=name, status="skipped"))
        for name, error in report.install.failed.items():
            report.steps.append(
                StepResult(kind=kind_of(name), target=name, status="failed", error=error)
            )

    for block in manifest.blocks:
        markers = Markers.for_tool(block.tool or manifest.tool, block.subsection)
        target = resolve_target(home, block.target)
        source = resolve_source(base_dir, block.source)
        _run_step(
            report, "block", target, dry_run,
            lambda: ensure_managed_block(target, source, markers.begin, markers.end, suffix),
        )

    for section in manifest.sections:
        markers = Markers.for_tool(section.tool or manifest.tool, section.subsection)
        target = resolve_target(home, section.target)
        if section.body is not None:
            body: str | None = section.body
        else:
            body = read_source(resolve_source(base_dir, section.source or ""))
        if body is None:
            message = f"Section source {section.source} is missing or empty; skipping {target}"
            logger.warning(message)
            report.steps.append(
                StepResult(kind="section", target=str(target), status="skipped", warnings=[message])
            )
            continue
        _run_step(
            report, "section", target, dry_run,
            lambda: replace_section(target, markers.begin, markers.end, body, suffix),
        )

    for line_spec in manifest.lines:
        target = resolve_target(home, line_spec.target)
        _run_step(
            report, "line", target, dry_run,
            lambda: ensure_line(
                target, line_spec.line, comment=line_spec.comment, backup_suffix=suffix
            ),
        )

    for file_spec in manifest.files:
        target = resolve_target(home, file_spec.target)
        source = resolve_source(base_dir, file_spec.source)
        _run_step(
            report, "file", target, dry_run,
            lambda: deploy_file(
                source,
                target,
                preserve_existing=file_spec.preserve_existing,
                make_executable=file_spec.make_executable,
                backup_suffix=suffix,
            ),
        )

    for dir_spec in manifest.directories:
        dest_dir = resolve_target(home, dir_spec.target)
        source_dir = resolve_source(base_dir, dir_spec.source)
        files = deployable_files(source_dir)
        if not files:
            message = f"No files to deploy in {source_dir}; skipping {dest_dir}"
            logger.warning(message)
            report.steps.append(
                StepResult(kind="file", target=str(dest_dir), status="skipped", warnings=[message])
            )
            continue
        for path in files:
            target = dest_dir / path.name
            _run_step(
                report, "file", target, dry_run,
                lambda: deploy_file(
                    path, target, make_executable=dir_spec.make_executable, backup_suffix=suffix
                ),
            )

    logger.info(
        "Apply finished: %d/%d step(s) succeeded (%s)",
        report.succeeded, report.total, report.status,
    )
    return report


def _run_step(
    report: ApplyReport,
    kind: str,
    target: Path,
    dry_run: bool,
    operation: Callable[[], MergeResult],
) -> None:
    """Run one file operation, recording failure instead of raising."""
    if dry_run:
        report.steps.append(
            StepResult(kind=kind, target=str(target), status="skipped", action="dry-run")
        )
        return

    try:
        result = operation()
    except MergeError as e:
        logger.error("%s", e)
        report.steps.append(
            StepResult(
                kind=kind,
                target=str(target),
                status="failed",
                error=str(e),
                error_kind=e.kind,
            )
        )
        return
    except (OSError, ValueError) as e:
        logger.error("%s: %s", target, e)
        report.steps.append(
            StepResult(kind=kind, target=str(target), status="failed", error=str(e))
        )
        return

    report.steps.append(StepResult.from_merge(kind, result))
