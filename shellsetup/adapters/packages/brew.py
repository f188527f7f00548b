"""
Homebrew adapter — ``brew install [--cask]`` and ``brew tap``.

A formula or cask that ``brew list`` already reports is skipped.
Otherwise the adapter runs brew, waits, and turns the exit code into
an ok/failed Receipt carrying brew's output.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from shellsetup.adapters.base import Adapter
from shellsetup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

# Apple Silicon, then Intel
BREW_CANDIDATES = ("/opt/homebrew/bin/brew", "/usr/local/bin/brew")

DEFAULT_TIMEOUT = 1800  # casks can take a while


def locate_brew() -> str | None:
    """Path to the brew executable, on PATH or at a standard prefix."""
    found = shutil.which("brew")
    if found:
        return found
    for candidate in BREW_CANDIDATES:
        if Path(candidate).is_file():
            return candidate
    return None


class HomebrewAdapter(Adapter):
    """Install formulae and casks, add taps."""

    def __init__(self, brew_path: str | None = None, timeout: int = DEFAULT_TIMEOUT):
        self._brew_path = brew_path
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "brew"

    @property
    def brew_path(self) -> str | None:
        return self._brew_path or locate_brew()

    def is_available(self) -> bool:
        return self.brew_path is not None

    def check(self, action: Action) -> str | None:
        if action.kind == "tool":
            return "tool installs run through the shell adapter"
        if not action.target.strip():
            return "no package or tap name given"
        if action.kind == "tap" and action.cask:
            return "a tap cannot be a cask"
        if not self.is_available():
            return "Homebrew not found. Install it from https://brew.sh/"
        return None

    def build_command(self, action: Action) -> list[str]:
        brew = self.brew_path or "brew"
        if action.kind == "tap":
            return [brew, "tap", action.target]
        if action.cask:
            return [brew, "install", "--cask", action.target]
        return [brew, "install", action.target]

    def is_installed(self, action: Action) -> bool:
        """Whether ``brew list`` already knows the formula or cask."""
        if action.kind != "install":
            return False
        command = [self.brew_path or "brew", "list", "--versions"]
        if action.cask:
            command.append("--cask")
        command.append(action.target)
        try:
            proc = subprocess.run(command, capture_output=True, text=True, timeout=60)
        except (OSError, subprocess.TimeoutExpired):
            return False
        return proc.returncode == 0 and bool(proc.stdout.strip())

    def run(self, action: Action) -> Receipt:
        if self.is_installed(action):
            logger.info("%s already installed", action.target)
            return Receipt.skip(action, reason=f"{action.target} already installed")

        command = self.build_command(action)
        logger.debug("Running %s", " ".join(command))

        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                action, f"brew timed out after {self._timeout}s", command=command
            )
        except OSError as e:
            return Receipt.failure(action, f"Cannot run brew: {e}", command=command)

        stdout = proc.stdout.strip()
        stderr = proc.stderr.strip()
        if proc.returncode == 0:
            return Receipt.success(
                action,
                output=stdout,
                command=command,
                return_code=0,
                metadata={"stderr": stderr} if stderr else {},
            )
        return Receipt.failure(
            action,
            stderr or f"brew exited with code {proc.returncode}",
            output=stdout,
            command=command,
            return_code=proc.returncode,
        )
