"""Graph connection service for workspace documents."""

__version__ = "0.1.0"
