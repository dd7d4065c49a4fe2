"""Hilal - prayer time calculation and adhan scheduling."""

__version__ = "0.1.0"
