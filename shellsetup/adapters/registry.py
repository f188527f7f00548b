"""
Adapter registry — the one place actions are dispatched.

Services hand an Action to the registry; it picks the adapter named by
``Action.adapter`` (or answers for it in mock mode), asks the adapter
whether the action can run, and runs it. A Receipt always comes back.
"""

from __future__ import annotations

import logging
import time

from shellsetup.adapters.base import Adapter
from shellsetup.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus mock mode for runs that must not install."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self.mock_mode = mock_mode
        self.mock_adapter: Adapter | None = None

    def use_mock(self, mock_adapter: Adapter | None = None) -> None:
        """Route every action to ``mock_adapter``.

        Without one, actions succeed immediately and nothing runs.
        """
        self.mock_mode = True
        self.mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def availability(self) -> dict[str, bool]:
        """Registered adapter names and whether their tool was found."""
        return {name: adapter.is_available() for name, adapter in self._adapters.items()}

    def execute_action(self, action: Action, dry_run: bool = False) -> Receipt:
        """Run ``action`` through its adapter. Never raises."""
        if self.mock_mode and self.mock_adapter is None:
            return Receipt.success(action, output=f"[mock] {action.describe()}", metadata={"mock": True})

        adapter = self.mock_adapter if self.mock_mode else self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(action, f"No adapter registered for '{action.adapter}'")

        problem = adapter.check(action)
        if problem:
            return Receipt.failure(action, f"Cannot {action.describe()}: {problem}")

        if dry_run:
            return Receipt.skip(action, reason=f"[dry-run] would {action.describe()}")

        started = time.monotonic()
        try:
            receipt = adapter.run(action)
        except Exception as e:  # adapters must not raise
            logger.error("Adapter %s raised on %s: %s", adapter.name, action.id, e)
            receipt = Receipt.failure(action, f"Unexpected error: {e}")
        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        return receipt
