"""Vocabulary review scheduler."""

__version__ = "1.0.0"
