"""
Tool interface — the closed set of file tools a model can call.

Each tool validates its JSON arguments, can describe what it would do
(:meth:`Tool.preview`) and then do it (:meth:`Tool.execute`).  Tools are
stateless; everything they touch comes in through :class:`ToolContext`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..editing.batch_executor import BatchEditExecutor
from ..editing.errors import AccessDenied, InvalidRequest
from ..editing.file_state_manager import FileStateManager
from ..permissions import is_path_accessible


@dataclass
class ToolContext:
    """Session resources passed to every tool call."""
    manager: FileStateManager
    executor: BatchEditExecutor
    accessible_paths: list[str] = field(default_factory=lambda: ["."])

    def is_accessible(self, path: str) -> bool:
        return is_path_accessible(path, self.accessible_paths)

    def check_access(self, path: str) -> None:
        if not self.is_accessible(path):
            raise AccessDenied(path)


class Tool(ABC):
    """Base class for the file tools.

    Example::

        tool = ReadFilesTool()
        text = tool.execute({"files": [{"file_path": "setup.py"}]}, ctx)
    """

    name: str = ""

    @abstractmethod
    def schema(self) -> dict:
        """Function description (name, description, JSON schema) for the model."""

    @abstractmethod
    def preview(self, args: dict, ctx: ToolContext) -> str:
        """Validate *args* and describe the call for a human, changing nothing."""

    @abstractmethod
    def execute(self, args: dict, ctx: ToolContext) -> str:
        """Perform the call and return plain text for the model."""

    @abstractmethod
    def is_safe_for_auto_execute(self, args: dict, ctx: ToolContext) -> bool:
        """Return True if the call may run without human approval."""


def file_specs(args: Any) -> list[dict]:
    """Return the ``files`` list of a read/create call."""
    if not isinstance(args, dict):
        raise InvalidRequest("Tool arguments must be a JSON object.")
    files = args.get("files")
    if not isinstance(files, list) or not all(isinstance(f, dict) for f in files):
        raise InvalidRequest("`files` must be a list of objects.")
    for spec in files:
        if not isinstance(spec.get("file_path"), str) or not spec["file_path"]:
            raise InvalidRequest("Every entry of `files` needs a non-empty `file_path`.")
    return files


__all__ = ["Tool", "ToolContext", "file_specs"]
