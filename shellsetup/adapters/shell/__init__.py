"""Shell adapters — tools installed by their own commands."""
