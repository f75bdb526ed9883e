"""Batch conversion pipeline shared by the file conversion tools."""

__version__ = "0.1.0"
