"""Data tools for the reading list website."""

__version__ = "1.0.0"
