"""
``create_files`` — creates new files and returns their LIF rendering.
"""

from __future__ import annotations

import logging
import os

from ..editing.errors import InvalidRequest, IoFailure, LifError
from ..editing.fileio import write_text_atomic
from ..editing.patch import decode_lines
from .base import Tool, ToolContext, file_specs

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
Creates one or more new files with the given lines of content.
The whole batch is validated first: if any target already exists or is not
accessible, no file is created.
Returns the LIF rendering (LIDs and hash) of each new file, which is needed for
any later edit of it. To move lines from an existing file, create an empty file
and use the `moves` operation of `edit_files`."""


class CreateFilesTool(Tool):
    name = "create_files"

    def schema(self) -> dict:
        return {
            "name": self.name,
            "description": _DESCRIPTION,
            "parameters": {
                "type": "object",
                "properties": {
                    "files": {
                        "type": "array",
                        "description": "A list of one or more files to create.",
                        "items": {
                            "type": "object",
                            "properties": {
                                "file_path": {
                                    "type": "string",
                                    "description": "The relative path for the new file.",
                                },
                                "content": {
                                    "type": "array",
                                    "items": {"type": "string"},
                                    "description": "The initial lines of content for the new file.",
                                },
                            },
                            "required": ["file_path", "content"],
                        },
                    },
                },
                "required": ["files"],
            },
        }

    def _plan(self, args: dict, ctx: ToolContext) -> list[tuple[str, list[str]]]:
        """Validate every entry before anything is written."""
        planned: list[tuple[str, list[str]]] = []
        seen: set[str] = set()
        for spec in file_specs(args):
            path = spec["file_path"]
            content = decode_lines(spec.get("content", []), "content")
            if os.path.lexists(path):
                raise InvalidRequest(f"File '{path}' already exists. Use 'edit_files' to modify it.")
            key = os.path.abspath(path)
            if key in seen:
                raise InvalidRequest(f"File '{path}' is listed more than once.")
            seen.add(key)
            ctx.check_access(path)
            planned.append((path, content))
        return planned

    def preview(self, args: dict, ctx: ToolContext) -> str:
        planned = self._plan(args, ctx)
        if not planned:
            return "No files were specified for creation."
        parts = [f"Create {len(planned)} file(s):"]
        for path, content in planned:
            body = "\n".join(f"+ {line}" for line in content) or "(empty)"
            parts.append(f"{path}:\n```\n{body}\n```")
        return "\n".join(parts)

    def execute(self, args: dict, ctx: ToolContext) -> str:
        planned = self._plan(args, ctx)
        if not planned:
            return "No files were specified for creation."

        results: list[str] = []
        for path, content in planned:
            try:
                parent = os.path.dirname(os.path.abspath(path))
                try:
                    os.makedirs(parent, exist_ok=True)
                except OSError as exc:
                    raise IoFailure(parent, exc.strerror or str(exc)) from exc
                write_text_atomic(path, "\n".join(content))
                state = ctx.manager.force_reload(path)
                logger.info("[Tools] Created %s (%d lines)", state.path, len(state.lines))
                results.append(f"File: {path}\n{state.display()}")
            except LifError as exc:
                results.append(f"File: {path}\nError: {exc}")
        return "\n\n---\n\n".join(results)

    def is_safe_for_auto_execute(self, args: dict, ctx: ToolContext) -> bool:
        try:
            files = file_specs(args)
        except InvalidRequest:
            return False
        return all(ctx.is_accessible(spec["file_path"]) for spec in files)
