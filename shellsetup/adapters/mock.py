"""
Mock adapter — stands in for Homebrew in mock runs and tests.

Every action succeeds unless marked to fail, or marked as already
installed, by its id. Every action run is recorded.
"""

from __future__ import annotations

from shellsetup.adapters.base import Adapter
from shellsetup.core.models.action import Action, Receipt


class MockAdapter(Adapter):
    """Records actions instead of installing anything."""

    def __init__(self, adapter_name: str = "brew", available: bool = True):
        self._name = adapter_name
        self._available = available
        self._failures: dict[str, str] = {}
        self._installed: set[str] = set()
        self.calls: list[Action] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def is_available(self) -> bool:
        return self._available

    def fail(self, action_id: str, error: str = "Mock failure") -> None:
        """Make the action with this id (``install:tmux``) fail."""
        self._failures[action_id] = error

    def mark_installed(self, action_id: str) -> None:
        """Report the action with this id as already installed (skipped)."""
        self._installed.add(action_id)

    def check(self, action: Action) -> str | None:
        return None

    def run(self, action: Action) -> Receipt:
        self.calls.append(action)
        if action.id in self._installed:
            return Receipt.skip(action, reason=f"{action.target} already installed", metadata={"mock": True})
        if action.id in self._failures:
            return Receipt.failure(action, self._failures[action.id], metadata={"mock": True})
        return Receipt.success(action, output=f"[mock] {action.describe()}", metadata={"mock": True})
