"""empress-cli: terminal client for a MongoDB-backed xAPI Learning Record Store."""

__version__ = "1.0.0"
