"""Ladybug: declarative issue housekeeping for GitHub repositories."""

__version__ = "0.3.0"
