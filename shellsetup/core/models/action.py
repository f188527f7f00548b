"""
Action and Receipt models — the install contract.

An Action asks for one install: a Homebrew formula or cask, a tap, or
a tool with its own install command (``uv tool install ruff``). A
Receipt is what comes back: ok, skipped (already installed) or failed.
Adapters return receipts for every outcome and never raise, so a
failed install is data the caller can report, not a crash.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ActionKind = Literal["install", "tap", "tool"]
ReceiptStatus = Literal["ok", "skipped", "failed"]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """One install request."""

    kind: ActionKind
    target: str                     # formula/cask, tap or tool name
    cask: bool = False
    adapter: str = "brew"

    # kind == "tool" only
    command: str | None = None      # shell command that installs it
    check: str | None = None        # executable whose presence means installed

    @property
    def id(self) -> str:
        """Stable key, e.g. ``install:kitty`` or ``tap:homebrew/cask-fonts``."""
        return f"{self.kind}:{self.target}"

    def describe(self) -> str:
        if self.kind == "tap":
            return f"tap {self.target}"
        if self.kind == "tool":
            return f"install {self.target} via `{self.command}`"
        return f"install {self.target}" + (" (cask)" if self.cask else "")


class Receipt(BaseModel):
    """What happened when an action ran (or did not)."""

    action_id: str
    adapter: str
    status: ReceiptStatus = "ok"

    output: str = ""
    error: str | None = None
    command: list[str] = Field(default_factory=list)
    return_code: int | None = None

    duration_ms: int = 0
    finished_at: str = Field(default_factory=_now_iso)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, action: Action, output: str = "", **kwargs: Any) -> Receipt:
        return cls(action_id=action.id, adapter=action.adapter, output=output, **kwargs)

    @classmethod
    def failure(cls, action: Action, error: str, **kwargs: Any) -> Receipt:
        return cls(
            action_id=action.id,
            adapter=action.adapter,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(cls, action: Action, reason: str = "", **kwargs: Any) -> Receipt:
        """A receipt for an action that was deliberately not run."""
        return cls(
            action_id=action.id,
            adapter=action.adapter,
            status="skipped",
            output=reason,
            **kwargs,
        )
