"""Configuration — manifest loading."""
