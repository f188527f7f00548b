"""Persistence — atomic writes and timestamped backups."""
