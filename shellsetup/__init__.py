"""shell-setup — macOS developer environment installer."""

__version__ = "0.1.0"
