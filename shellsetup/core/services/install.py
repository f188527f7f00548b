"""
Package installation — taps, packages and tools through the adapter registry.

Every package and tool is attempted even when earlier ones fail; the report
says which succeeded. Nothing here raises for a failed install.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from shellsetup.adapters.registry import AdapterRegistry
from shellsetup.core.models.action import Action, Receipt
from shellsetup.core.models.manifest import PackageSpec, ToolSpec

logger = logging.getLogger(__name__)

BREW_ADAPTER = "brew"
SHELL_ADAPTER = "shell"


@dataclass
class InstallReport:
    """Outcome of an install pass."""

    installed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)   # name → error
    receipts: list[Receipt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "installed": self.installed,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def tap_action(tap: str) -> Action:
    return Action(kind="tap", target=tap, adapter=BREW_ADAPTER)


def install_action(package: PackageSpec) -> Action:
    return Action(kind="install", target=package.name, cask=package.cask, adapter=BREW_ADAPTER)


def tool_action(tool: ToolSpec) -> Action:
    return Action(
        kind="tool",
        target=tool.name,
        adapter=SHELL_ADAPTER,
        command=tool.command,
        check=tool.check,
    )


def install_packages(
    registry: AdapterRegistry,
    packages: list[PackageSpec],
    taps: list[str] | None = None,
    tools: list[ToolSpec] | None = None,
    dry_run: bool = False,
) -> InstallReport:
    """Add taps, install each package, then each tool.

    A failed tap is logged and ignored: the packages that need it fail
    on their own and are reported there. Packages and tools that are
    already installed come back skipped.
    """
    report = InstallReport()

    for tap in taps or []:
        receipt = registry.execute_action(tap_action(tap), dry_run=dry_run)
        report.receipts.append(receipt)
        if receipt.failed:
            logger.warning("Tap %s failed: %s", tap, receipt.error)

    for package in packages:
        logger.info("Installing %s...", package.name)
        _record(report, package.name, registry.execute_action(install_action(package), dry_run=dry_run))

    for tool in tools or []:
        logger.info("Checking %s...", tool.name)
        _record(report, tool.name, registry.execute_action(tool_action(tool), dry_run=dry_run))

    return report


def _record(report: InstallReport, name: str, receipt: Receipt) -> None:
    report.receipts.append(receipt)
    if receipt.ok:
        report.installed.append(name)
    elif receipt.failed:
        logger.warning("%s installation failed: %s", name, receipt.error)
        report.failed[name] = receipt.error or "unknown error"
    else:
        report.skipped.append(name)
