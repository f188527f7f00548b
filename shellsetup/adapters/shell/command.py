"""
Tool command adapter — install-or-skip for tools outside Homebrew.

Language servers and CLIs come from their own installers::

    uv tool install ruff
    npm install -g pyright
    cargo install taplo-cli
    rustup component add rust-analyzer

The adapter first looks for the tool's executable on PATH. If it is
there the action is skipped; otherwise the install command runs
through the shell and its exit code decides ok or failed.
"""

from __future__ import annotations

import logging
import shutil
import subprocess

from shellsetup.adapters.base import Adapter
from shellsetup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 900


class ToolCommandAdapter(Adapter):
    """Run a tool's own install command unless the tool is on PATH."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def check(self, action: Action) -> str | None:
        if action.kind != "tool":
            return f"cannot handle '{action.kind}' actions"
        if not (action.command or "").strip():
            return "no install command given"
        return None

    def run(self, action: Action) -> Receipt:
        executable = action.check or action.target
        found = shutil.which(executable)
        if found:
            logger.info("%s already installed (%s)", action.target, found)
            return Receipt.skip(action, reason=f"{action.target} already installed", metadata={"path": found})

        command = action.command or ""
        logger.info("Installing %s: %s", action.target, command)
        try:
            proc = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(action, f"install timed out after {self._timeout}s")
        except OSError as e:
            return Receipt.failure(action, f"Cannot run install command: {e}")

        stdout = proc.stdout.strip()
        if proc.returncode == 0:
            return Receipt.success(action, output=stdout, return_code=0)
        return Receipt.failure(
            action,
            proc.stderr.strip() or f"install command exited with code {proc.returncode}",
            output=stdout,
            return_code=proc.returncode,
        )
