"""
Tool worker — runs file tool calls one at a time on a dedicated thread.

Every call holds the session's exclusive lock from validation to the last
write, so patch applications are serialised across all files.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from ..editing.errors import LifError
from .base import Tool, ToolContext

logger = logging.getLogger(__name__)


@dataclass
class ToolOutcome:
    """Result of one tool call."""
    success: bool
    output: str = ""
    error: str = ""
    error_kind: str = ""

    @property
    def text(self) -> str:
        return self.output if self.success else f"Error: {self.error}"


class ToolWorker:
    """Serial executor for :class:`Tool` calls.

    Usage::

        with ToolWorker(tools, ctx) as worker:
            outcome = worker.run("read_files", {"files": [{"file_path": "a.py"}]})
    """

    def __init__(self, tools: dict[str, Tool], ctx: ToolContext) -> None:
        self._tools = dict(tools)
        self._ctx = ctx
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lif-tools")

    @property
    def tools(self) -> dict[str, Tool]:
        return dict(self._tools)

    def _tool(self, name: str) -> Optional[Tool]:
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("[Tools] Unknown tool requested: %s", name)
        return tool

    def _call(self, name: str, args: dict, preview: bool) -> ToolOutcome:
        tool = self._tool(name)
        if tool is None:
            return ToolOutcome(False, error=f"Unknown tool '{name}'.", error_kind="unknown_tool")

        with self._ctx.manager.exclusive():
            try:
                if preview:
                    output = tool.preview(args, self._ctx)
                else:
                    output = tool.execute(args, self._ctx)
            except LifError as exc:
                logger.info("[Tools] %s failed (%s): %s", name, exc.kind, exc)
                return ToolOutcome(False, error=str(exc), error_kind=exc.kind)

        logger.debug("[Tools] %s %s", name, "previewed" if preview else "executed")
        return ToolOutcome(True, output=output)

    def submit(self, name: str, args: dict) -> "Future[ToolOutcome]":
        """Queue a call and return a future for its outcome."""
        return self._pool.submit(self._call, name, args, False)

    def run(self, name: str, args: dict) -> ToolOutcome:
        """Execute a call and wait for its outcome."""
        return self.submit(name, args).result()

    def preview(self, name: str, args: dict) -> ToolOutcome:
        return self._pool.submit(self._call, name, args, True).result()

    def is_safe_for_auto_execute(self, name: str, args: dict) -> bool:
        tool = self._tool(name)
        return tool is not None and tool.is_safe_for_auto_execute(args, self._ctx)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "ToolWorker":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
