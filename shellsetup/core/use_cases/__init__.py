"""Use cases — orchestrate services for the CLI."""
