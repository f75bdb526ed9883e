"""Conversion tools built on the batch pipeline."""

from .registry import TOOLS, get_tool, list_tools

__all__ = ["TOOLS", "get_tool", "list_tools"]
