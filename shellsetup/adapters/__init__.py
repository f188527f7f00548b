"""Adapters — bindings for external package managers and installers.

Public re-exports for convenient access.
"""

from shellsetup.adapters.base import Adapter
from shellsetup.adapters.mock import MockAdapter
from shellsetup.adapters.packages.brew import HomebrewAdapter
from shellsetup.adapters.registry import AdapterRegistry
from shellsetup.adapters.shell.command import ToolCommandAdapter

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "HomebrewAdapter",
    "MockAdapter",
    "ToolCommandAdapter",
]
