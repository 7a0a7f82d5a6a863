"""
``edit_files`` — batch inserts, replaces and moves addressed by anchors.
"""

from __future__ import annotations

from ..editing.batch_executor import decode_batch_request
from ..editing.errors import InvalidRequest
from .base import Tool, ToolContext

_DESCRIPTION = """\
Atomically performs file edits addressed by inclusive line anchors.
An anchor is {"lid": ..., "line_content": ...} copied from the latest LIF
rendering; the edit is rejected if the line no longer has that content.

For both `moves` and `replaces` the anchors are INCLUSIVE: the anchor lines and
everything between them are part of the operation. To replace an entire file,
set both `anchor_range_begin` and `anchor_range_end` to null.

Execution order: 1. replaces, 2. inserts, 3. moves. If any operation fails
validation, no file is changed."""

_POSITIONS = ["start_of_file", "end_of_file", "after_anchor", "before_anchor"]


def _anchor_schema(description: str, nullable: bool = True) -> dict:
    return {
        "type": ["object", "null"] if nullable else "object",
        "description": description,
        "properties": {
            "lid": {
                "type": "string",
                "description": "The LID of the anchor line, prefixed with 'lid-'.",
            },
            "line_content": {
                "type": "string",
                "description": "The exact, single-line content of the anchor line.",
                "pattern": "^[^\r\n]*$",
            },
        },
        "additionalProperties": False,
        "required": ["lid", "line_content"],
    }


_LINES = {"type": "array", "items": {"type": "string"}}


class EditFilesTool(Tool):
    name = "edit_files"

    def schema(self) -> dict:
        return {
            "name": self.name,
            "description": _DESCRIPTION,
            "parameters": {
                "type": "object",
                "properties": {
                    "replaces": {
                        "type": "array",
                        "description": "Replace operations. The range is INCLUSIVE.",
                        "items": {
                            "type": "object",
                            "properties": {
                                "file_path": {"type": "string"},
                                "anchor_range_begin": _anchor_schema(
                                    "FIRST line to replace; null means the start of the file."),
                                "anchor_range_end": _anchor_schema(
                                    "LAST line to replace; null means the end of the file."),
                                "new_content": dict(_LINES, description="Replacement lines; empty deletes."),
                            },
                            "additionalProperties": False,
                            "required": ["file_path", "anchor_range_begin", "anchor_range_end", "new_content"],
                        },
                    },
                    "inserts": {
                        "type": "array",
                        "description": "Insert operations.",
                        "items": {
                            "type": "object",
                            "properties": {
                                "file_path": {"type": "string"},
                                "at_position": {"enum": _POSITIONS},
                                "context_anchor": _anchor_schema(
                                    "Required for 'after_anchor' and 'before_anchor'."),
                                "new_content": dict(_LINES, description="Lines to insert."),
                            },
                            "additionalProperties": False,
                            "required": ["file_path", "at_position", "context_anchor", "new_content"],
                        },
                    },
                    "moves": {
                        "type": "array",
                        "description": "Move operations. The source range is INCLUSIVE.",
                        "items": {
                            "type": "object",
                            "properties": {
                                "source_file_path": {"type": "string"},
                                "source_range_start_anchor": _anchor_schema(
                                    "FIRST line of the moved range.", nullable=False),
                                "source_range_end_anchor": _anchor_schema(
                                    "LAST line of the moved range.", nullable=False),
                                "dest_file_path": {"type": "string"},
                                "dest_at_position": {"enum": _POSITIONS},
                                "dest_context_anchor": _anchor_schema(
                                    "Required for 'after_anchor' and 'before_anchor'."),
                            },
                            "additionalProperties": False,
                            "required": [
                                "source_file_path", "source_range_start_anchor",
                                "source_range_end_anchor", "dest_file_path",
                                "dest_at_position", "dest_context_anchor",
                            ],
                        },
                    },
                },
                "additionalProperties": False,
                "required": ["replaces", "inserts", "moves"],
            },
        }

    def preview(self, args: dict, ctx: ToolContext) -> str:
        return ctx.executor.preview(decode_batch_request(args))

    def execute(self, args: dict, ctx: ToolContext) -> str:
        result = ctx.executor.execute(decode_batch_request(args))
        if result.exception is not None:
            raise result.exception
        return result.render()

    def is_safe_for_auto_execute(self, args: dict, ctx: ToolContext) -> bool:
        try:
            request = decode_batch_request(args)
        except InvalidRequest:
            return False
        return all(ctx.is_accessible(path) for path in request.paths())
