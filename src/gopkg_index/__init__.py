"""Resolve Go package names to import paths from scanned source roots."""

__version__ = "0.1.0"
