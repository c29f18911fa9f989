"""Dependency documentation retrieval and gateway generation."""

__version__ = "0.1.0"
