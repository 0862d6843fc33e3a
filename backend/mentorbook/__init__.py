"""Mentor availability and booking scheduling backend."""

__version__ = "1.0.0"
