"""Kaamyab - weekly goal plan execution core."""

__version__ = "0.1.0"
