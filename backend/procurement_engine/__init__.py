"""Procurement policy engine: splintering detection and request combination."""

__version__ = "0.1.0"
