"""Compliance document matching: missing-requirement and duplicate analysis."""

__version__ = "0.1.0"
