"""
Patch primitives — the validated commands the patch engine executes.

Operations arrive from tool-call arguments either as tagged objects::

    {"op": "i", "after_lid": "lid-V", "content": ["new line"]}
    {"op": "r", "start_lid": "lid-G", "end_lid": "lid-l", "content": []}

or in the compact array form ``["i", after_lid, content]`` /
``["r", start_lid, end_lid, content]``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import InvalidRequest
from .lid import END_OF_FILE, START_OF_FILE


@dataclass
class InsertOp:
    """Insert *content* after ``after_lid`` or before ``before_lid``.

    ``after_lid`` may be :data:`START_OF_FILE` or :data:`END_OF_FILE`.
    Exactly one of the two positions is set.
    """
    content: list[str] = field(default_factory=list)
    after_lid: Optional[str] = None
    before_lid: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.after_lid is None) == (self.before_lid is None):
            raise InvalidRequest("Insert needs exactly one of 'after_lid' or 'before_lid'.")


@dataclass
class ReplaceOp:
    """Replace the inclusive span ``[start_lid, end_lid]`` (empty content deletes)."""
    start_lid: str
    end_lid: str
    content: list[str] = field(default_factory=list)


PatchOperation = Union[InsertOp, ReplaceOp]


def decode_lines(value, what: str) -> list[str]:
    """Validate a JSON list of single-line strings."""
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidRequest(f"{what} must be a list of strings.")
    for line in value:
        if "\n" in line:
            raise InvalidRequest(f"{what} entries must be single lines (found a line break).")
    return list(value)


def _identifier(value, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidRequest(f"'{what}' must be a non-empty string.")
    return value


def decode_operation(raw) -> PatchOperation:
    """Decode one operation from its JSON form."""
    if isinstance(raw, list):
        if not raw:
            raise InvalidRequest("Empty patch operation.")
        op_code, args = raw[0], raw[1:]
        if op_code == "i" and len(args) == 2:
            return InsertOp(
                after_lid=_identifier(args[0], "after_lid"),
                content=decode_lines(args[1], "content"),
            )
        if op_code == "r" and len(args) == 3:
            return ReplaceOp(
                start_lid=_identifier(args[0], "start_lid"),
                end_lid=_identifier(args[1], "end_lid"),
                content=decode_lines(args[2], "content"),
            )
        raise InvalidRequest(f"Malformed patch operation: {raw!r}")

    if not isinstance(raw, dict):
        raise InvalidRequest(f"Patch operation must be an object or array, got {type(raw).__name__}.")

    op_code = raw.get("op")
    content = decode_lines(raw.get("content", []), "content")
    if op_code == "i":
        if "before_lid" in raw and raw["before_lid"] is not None:
            return InsertOp(content=content, before_lid=_identifier(raw["before_lid"], "before_lid"))
        return InsertOp(content=content, after_lid=_identifier(raw.get("after_lid"), "after_lid"))
    if op_code == "r":
        return ReplaceOp(
            start_lid=_identifier(raw.get("start_lid"), "start_lid"),
            end_lid=_identifier(raw.get("end_lid"), "end_lid"),
            content=content,
        )
    raise InvalidRequest(f"Unknown patch operation code {op_code!r}; expected 'i' or 'r'.")


def decode_operations(raw) -> list[PatchOperation]:
    """Decode a JSON list of operations."""
    if not isinstance(raw, list):
        raise InvalidRequest("A patch must be a list of operations.")
    return [decode_operation(item) for item in raw]


__all__ = [
    "InsertOp", "ReplaceOp", "PatchOperation",
    "decode_operation", "decode_operations", "decode_lines",
    "START_OF_FILE", "END_OF_FILE",
]
