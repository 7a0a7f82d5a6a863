"""
Patch engine — applies insert/replace operations to a file state
transactionally and commits the result to disk.

Every call works on a scratch copy of the line map.  The live state is
swapped only after all operations succeed, so a failing operation never
leaves a file half-patched.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from . import lid as lids
from .diff_renderer import DEFAULT_CONTEXT_LINES, render_diff
from .errors import InvalidRange, InvalidRequest, IoFailure, UnknownIdentifier
from .file_state import FileState, LineMap, StateSnapshot
from .fileio import write_text_atomic
from .patch import InsertOp, PatchOperation, ReplaceOp

logger = logging.getLogger(__name__)


class PatchEngine:
    """Apply patch operations to :class:`FileState` objects."""

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES) -> None:
        self._context_lines = context_lines

    @property
    def context_lines(self) -> int:
        return self._context_lines

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(self, state: FileState, operations: Sequence[PatchOperation]) -> LineMap:
        """Apply *operations* to a scratch copy of ``state.lines``.

        Returns the resulting line map; *state* is never modified.  Raises
        the first validation error encountered.
        """
        scratch = state.lines.copy()
        for operation in operations:
            if isinstance(operation, ReplaceOp):
                self._replace(scratch, operation, state.path)
            elif isinstance(operation, InsertOp):
                self._insert(scratch, operation, state.path)
            else:
                raise InvalidRequest(f"Unsupported patch operation: {operation!r}")
        return scratch

    def apply(self, state: FileState, operations: Sequence[PatchOperation]) -> None:
        """Apply *operations* in memory, all or nothing."""
        new_lines = self.plan(state, operations)
        old_hash = state.short_hash
        state.replace_lines(new_lines)
        logger.debug(
            "[Patch] Applied %d operation(s) to %s (%s -> %s)",
            len(operations), state.path, old_hash, state.short_hash,
        )

    def commit(self, state: FileState, new_lines: LineMap) -> str:
        """Swap *new_lines* into *state*, write it to disk and return the diff.

        If the write fails the in-memory state is restored before the
        :class:`IoFailure` propagates.
        """
        snapshot = state.snapshot()
        state.replace_lines(new_lines)
        try:
            write_text_atomic(state.path, state.full_content())
        except IoFailure:
            state.restore(snapshot)
            raise
        return render_diff(snapshot.lines, state.lines, self._context_lines)

    def apply_and_commit(self, state: FileState, operations: Sequence[PatchOperation]) -> str:
        """Apply *operations*, write the file and return the rendered diff.

        Disk is not touched when any operation fails validation.
        """
        return self.commit(state, self.plan(state, operations))

    def diff(self, old_lines, new_lines) -> str:
        """Render a diff using this engine's context width."""
        return render_diff(old_lines, new_lines, self._context_lines)

    def preview(self, state: FileState, operations: Sequence[PatchOperation]) -> str:
        """Diff a dry run of *operations* without changing anything."""
        return render_diff(state.lines, self.plan(state, operations), self._context_lines)

    def revert(self, state: FileState, snapshot: StateSnapshot) -> None:
        """Restore *snapshot* in memory and on disk."""
        state.restore(snapshot)
        write_text_atomic(state.path, state.full_content())

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @staticmethod
    def _require(scratch: LineMap, lid: str, path: str) -> str:
        if lids.is_sentinel(lid):
            raise UnknownIdentifier(lid, path, hint="A file boundary cannot be used here.")
        lids.parse_lid(lid)
        if lid not in scratch:
            raise UnknownIdentifier(lid, path)
        return lid

    def _replace(self, scratch: LineMap, op: ReplaceOp, path: str) -> None:
        start = self._require(scratch, op.start_lid, path)
        end = self._require(scratch, op.end_lid, path)
        if start > end:
            raise InvalidRange(start, end)

        anchor = scratch.predecessor(start)
        scratch.remove_span(start, end)
        self._insert_after(scratch, anchor, op.content)

    def _insert(self, scratch: LineMap, op: InsertOp, path: str) -> None:
        if op.before_lid is not None:
            before = self._require(scratch, op.before_lid, path)
            self._insert_after(scratch, scratch.predecessor(before), op.content)
        elif op.after_lid == lids.START_OF_FILE:
            self._insert_after(scratch, None, op.content)
        elif op.after_lid == lids.END_OF_FILE:
            self._insert_after(scratch, scratch.last(), op.content)
        else:
            self._insert_after(scratch, self._require(scratch, op.after_lid, path), op.content)

    @staticmethod
    def _insert_after(scratch: LineMap, after_lid: Optional[str], content: Sequence[str]) -> None:
        """Insert *content* right after *after_lid* (``None`` = file start)."""
        if not content:
            return
        upper_lid = scratch.first() if after_lid is None else scratch.successor(after_lid)
        lower = lids.parse_lid(after_lid) if after_lid is not None else None
        upper = lids.parse_lid(upper_lid) if upper_lid is not None else None
        for key, line in zip(lids.allocate(lower, upper, len(content)), content):
            scratch.insert(lids.format_lid(key), line)
