"""Bill splitting tools."""

__version__ = "0.1.0"
