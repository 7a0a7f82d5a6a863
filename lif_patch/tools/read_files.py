"""
``read_files`` — renders files (or line ranges of them) in LIF format.
"""

from __future__ import annotations

import logging
import os

from ..editing.errors import InvalidRequest, LifError, NotAFile
from ..editing.file_state import RangeSpec
from .base import Tool, ToolContext, file_specs

logger = logging.getLogger(__name__)

_DESCRIPTION = """\
Reads files and returns them in Line-Indexed File (LIF) format.
Use this tool only to read a file for the first time, or when it may have been
changed by an external process. Prefer targeted line ranges when you know them.

Each line is prefixed with its line number and a unique Line Identifier (LID):
```
File: jokes.txt | Hash: 931d3b24 | Lines: 1-1/1
1    lid-V: Why do programmers prefer dark mode? Because light attracts bugs.
```
The line number is for display only. When editing, always use the full LID
including its prefix (e.g. `lid-V`)."""


def _ranges(spec: dict) -> list[RangeSpec] | None:
    raw = spec.get("ranges")
    if not raw:
        return None
    if not isinstance(raw, list):
        raise InvalidRequest("`ranges` must be a list of {start_line, end_line} objects.")
    ranges = []
    for item in raw:
        if not isinstance(item, dict):
            raise InvalidRequest("`ranges` must be a list of {start_line, end_line} objects.")
        start, end = item.get("start_line"), item.get("end_line")
        if not isinstance(start, int) or not isinstance(end, int):
            raise InvalidRequest("`start_line` and `end_line` must be integers.")
        ranges.append(RangeSpec(start, end))
    return ranges


class ReadFilesTool(Tool):
    name = "read_files"

    def schema(self) -> dict:
        return {
            "name": self.name,
            "description": _DESCRIPTION,
            "parameters": {
                "type": "object",
                "properties": {
                    "files": {
                        "type": "array",
                        "description": "A list of files to read.",
                        "items": {
                            "type": "object",
                            "properties": {
                                "file_path": {
                                    "type": "string",
                                    "description": "The relative path to the file to be read.",
                                },
                                "ranges": {
                                    "type": "array",
                                    "description": "1-based inclusive line ranges. If omitted or empty, the entire file is read.",
                                    "items": {
                                        "type": "object",
                                        "properties": {
                                            "start_line": {"type": "integer"},
                                            "end_line": {"type": "integer"},
                                        },
                                        "additionalProperties": False,
                                        "required": ["start_line", "end_line"],
                                    },
                                },
                            },
                            "additionalProperties": False,
                            "required": ["file_path"],
                        },
                    },
                },
                "additionalProperties": False,
                "required": ["files"],
            },
        }

    def _validate(self, args: dict, ctx: ToolContext) -> list[dict]:
        files = file_specs(args)
        if not files:
            raise InvalidRequest("No files were specified to read.")
        for spec in files:
            ctx.check_access(spec["file_path"])
            if os.path.exists(spec["file_path"]) and not os.path.isfile(spec["file_path"]):
                raise NotAFile(spec["file_path"])
        return files

    def preview(self, args: dict, ctx: ToolContext) -> str:
        files = self._validate(args, ctx)
        lines = [f"Read {len(files)} file(s):"]
        for spec in files:
            ranges = _ranges(spec)
            if ranges:
                shown = ", ".join(f"{r.start_line}-{r.end_line}" for r in ranges)
                lines.append(f"  {spec['file_path']} (lines {shown})")
            else:
                lines.append(f"  {spec['file_path']}")
        return "\n".join(lines)

    def execute(self, args: dict, ctx: ToolContext) -> str:
        files = self._validate(args, ctx)
        rendered: list[str] = []
        for spec in files:
            path = spec["file_path"]
            try:
                text = ctx.manager.open(path).display(_ranges(spec))
            except LifError as exc:
                logger.info("[Tools] read_files failed for %s: %s", path, exc)
                text = f"Error reading file '{path}': {exc}"
            if len(files) > 1:
                text = f"--- File: {path} ---\n{text}"
            rendered.append(text)
        return "\n\n".join(rendered)

    def is_safe_for_auto_execute(self, args: dict, ctx: ToolContext) -> bool:
        try:
            files = file_specs(args)
        except InvalidRequest:
            return False
        return all(ctx.is_accessible(spec["file_path"]) for spec in files)
