"""Message log with per-viewer visibility."""
