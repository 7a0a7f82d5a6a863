"""File tools — read, create and edit files through the LIF protocol."""

from __future__ import annotations

from .base import Tool, ToolContext
from .create_files import CreateFilesTool
from .edit_files import EditFilesTool
from .read_files import ReadFilesTool
from .worker import ToolOutcome, ToolWorker


def build_tools() -> dict[str, Tool]:
    """Return the registered tools keyed by name."""
    tools: list[Tool] = [ReadFilesTool(), CreateFilesTool(), EditFilesTool()]
    return {tool.name: tool for tool in tools}


__all__ = [
    "Tool", "ToolContext", "ReadFilesTool", "CreateFilesTool", "EditFilesTool",
    "ToolOutcome", "ToolWorker", "build_tools",
]
