"""Keeps target git repositories force-mirrored from their sources."""

__version__ = "0.1.0"
