"""CLI sub-command groups registered by shellsetup.main."""
