"""Grid graph view of branching game records."""

__version__ = "0.1.0"
