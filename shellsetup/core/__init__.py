"""Core — models, services and use cases (no CLI concerns)."""
