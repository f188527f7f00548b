"""
Adapter base — how shell-setup talks to a package manager.

Package installs are the only side effects delegated to outside
programs. Each one goes through an adapter so the rest of the code
sees a plain ok/failed Receipt and tests can swap in a mock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shellsetup.core.models.action import Action, Receipt


class Adapter(ABC):
    """A package manager binding.

    ``run`` must not raise: every failure, including a missing
    executable or a timeout, comes back as a failed Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter key matched against ``Action.adapter`` (e.g. 'brew')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the package manager can be found."""

    @abstractmethod
    def check(self, action: Action) -> str | None:
        """Reason ``action`` cannot run here, or None if it can."""

    @abstractmethod
    def run(self, action: Action) -> Receipt:
        """Run the action to completion."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
