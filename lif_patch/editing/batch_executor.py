"""
Batch edit executor — resolves a multi-file edit request against the
current file states and applies it all-or-nothing.

A batch runs in three phases:

1. **Plan**: every sub-request is resolved (paths checked, files opened,
   anchors validated) in the fixed order replaces, inserts, moves.  A move
   whose source range holds lines changed earlier in the same batch is
   rejected.  All failures are collected and reported together.
2. **Dry run**: the planned operations of every file are applied to scratch
   copies.  Nothing has been written yet, so any failure here leaves all
   files and cached states untouched.
3. **Commit**: each file is swapped and written.  If a write fails, files
   already written in this batch are restored.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from . import lid as lids
from .anchors import Anchor, resolve_anchor
from .diff_renderer import colorize_diff, diff_stats
from .errors import (
    AccessDenied,
    BatchValidationError,
    InvalidRange,
    InvalidRequest,
    BatchCommitError,
    IoFailure,
    LifError,
)
from .file_state import FileState, LineMap, StateSnapshot
from .file_state_manager import FileStateManager
from .metrics import DEFAULT_METRICS_DIR, log_edit_metric
from .patch import InsertOp, PatchOperation, ReplaceOp, decode_lines
from .patch_engine import PatchEngine

logger = logging.getLogger(__name__)

NO_OPERATIONS = "No file operations provided in the tool call."
RESULT_SEPARATOR = "\n\n---\n\n"


# ----------------------------------------------------------------------
# Request model
# ----------------------------------------------------------------------

class Position(str, Enum):
    START_OF_FILE = "start_of_file"
    END_OF_FILE = "end_of_file"
    AFTER_ANCHOR = "after_anchor"
    BEFORE_ANCHOR = "before_anchor"

    @classmethod
    def parse(cls, value, field_name: str) -> "Position":
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise InvalidRequest(f"`{field_name}` must be one of: {choices}.") from None


@dataclass
class InsertRequest:
    file_path: str
    at_position: Position
    new_content: list[str]
    context_anchor: Optional[Anchor] = None


@dataclass
class ReplaceRequest:
    """Replace the inclusive anchor range; a missing bound means file start/end."""
    file_path: str
    new_content: list[str]
    anchor_range_begin: Optional[Anchor] = None
    anchor_range_end: Optional[Anchor] = None


@dataclass
class MoveRequest:
    source_file_path: str
    source_range_start_anchor: Anchor
    source_range_end_anchor: Anchor
    dest_file_path: str
    dest_at_position: Position
    dest_context_anchor: Optional[Anchor] = None


@dataclass
class BatchEditRequest:
    inserts: list[InsertRequest] = field(default_factory=list)
    replaces: list[ReplaceRequest] = field(default_factory=list)
    moves: list[MoveRequest] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.inserts or self.replaces or self.moves)

    @property
    def operation_count(self) -> int:
        return len(self.inserts) + len(self.replaces) + len(self.moves)

    def paths(self) -> list[str]:
        """Every file path the request touches, in request order."""
        found: list[str] = []
        for req in self.inserts:
            found.append(req.file_path)
        for req in self.replaces:
            found.append(req.file_path)
        for req in self.moves:
            found.extend([req.source_file_path, req.dest_file_path])
        return list(dict.fromkeys(found))


def _string(raw: dict, key: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidRequest(f"`{key}` must be a non-empty string.")
    return value


def _optional_anchor(raw: dict, key: str) -> Optional[Anchor]:
    value = raw.get(key)
    return None if value is None else Anchor.from_dict(value, key)


def _required_anchor(raw: dict, key: str) -> Anchor:
    if raw.get(key) is None:
        raise InvalidRequest(f"`{key}` is required.")
    return Anchor.from_dict(raw[key], key)


def _items(raw: dict, key: str) -> list[dict]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise InvalidRequest(f"`{key}` must be a list of objects.")
    return value


def decode_batch_request(raw) -> BatchEditRequest:
    """Decode the JSON arguments of an edit call.

    Missing or ``null`` lists are treated as empty.
    """
    if not isinstance(raw, dict):
        raise InvalidRequest("Edit arguments must be a JSON object.")

    request = BatchEditRequest()
    for item in _items(raw, "inserts"):
        request.inserts.append(InsertRequest(
            file_path=_string(item, "file_path"),
            at_position=Position.parse(item.get("at_position"), "at_position"),
            new_content=decode_lines(item.get("new_content", []), "new_content"),
            context_anchor=_optional_anchor(item, "context_anchor"),
        ))
    for item in _items(raw, "replaces"):
        request.replaces.append(ReplaceRequest(
            file_path=_string(item, "file_path"),
            new_content=decode_lines(item.get("new_content", []), "new_content"),
            anchor_range_begin=_optional_anchor(item, "anchor_range_begin"),
            anchor_range_end=_optional_anchor(item, "anchor_range_end"),
        ))
    for item in _items(raw, "moves"):
        request.moves.append(MoveRequest(
            source_file_path=_string(item, "source_file_path"),
            source_range_start_anchor=_required_anchor(item, "source_range_start_anchor"),
            source_range_end_anchor=_required_anchor(item, "source_range_end_anchor"),
            dest_file_path=_string(item, "dest_file_path"),
            dest_at_position=Position.parse(item.get("dest_at_position"), "dest_at_position"),
            dest_context_anchor=_optional_anchor(item, "dest_context_anchor"),
        ))
    return request


# ----------------------------------------------------------------------
# Results
# ----------------------------------------------------------------------

@dataclass
class RequestError:
    """A failure tied to one sub-request (or one file during the dry run)."""
    description: str
    error: LifError

    @property
    def kind(self) -> str:
        return self.error.kind

    def __str__(self) -> str:
        return f"{self.description}: {self.error}"


@dataclass
class Footprint:
    """Where an already planned sub-request changes a file.

    Either a replaced span ``[start, end]`` or an insertion point given by
    ``after`` / ``before``.
    """
    label: str
    path: str
    start: Optional[str] = None
    end: Optional[str] = None
    after: Optional[str] = None
    before: Optional[str] = None

    def lands_inside(self, path: str, start: str, end: str) -> bool:
        """True if this change would be swept up by deleting ``[start, end]``."""
        if path != self.path:
            return False
        if self.start is not None and self.end is not None:
            return self.start <= end and start <= self.end
        if self.after is not None and not lids.is_sentinel(self.after):
            return start <= self.after < end
        if self.before is not None:
            return start < self.before <= end
        return False


@dataclass
class EditPlan:
    """Resolved operations grouped per canonical file path."""
    planned_ops: dict[str, list[PatchOperation]] = field(default_factory=dict)
    states: dict[str, FileState] = field(default_factory=dict)
    footprints: list[Footprint] = field(default_factory=list)

    def add(self, state: FileState, operation: PatchOperation, label: str = "") -> None:
        self.states[state.path] = state
        self.planned_ops.setdefault(state.path, []).append(operation)
        if isinstance(operation, ReplaceOp):
            self.footprints.append(Footprint(
                label, state.path, start=operation.start_lid, end=operation.end_lid,
            ))
        else:
            self.footprints.append(Footprint(
                label, state.path, after=operation.after_lid, before=operation.before_lid,
            ))

    def conflicts_with(self, path: str, start: str, end: str) -> list[str]:
        """Labels of planned changes that fall inside ``[start, end]`` of *path*."""
        return [fp.label for fp in self.footprints if fp.lands_inside(path, start, end)]


@dataclass
class FileEditResult:
    path: str
    display_path: str
    old_hash: str
    new_hash: str
    diff: str
    lines_added: int = 0
    lines_removed: int = 0

    def summary(self) -> str:
        return (
            f"File: {self.display_path}\n"
            f"Patch from hash {self.old_hash} applied successfully. "
            f"New hash: {self.new_hash}. Changes:\n{self.diff}"
        )


@dataclass
class BatchResult:
    """Result of executing a batch edit."""
    success: bool = False
    files_modified: list[str] = field(default_factory=list)
    file_results: list[FileEditResult] = field(default_factory=list)
    errors: list[RequestError] = field(default_factory=list)
    error: str = ""
    error_kind: str = ""
    exception: Optional[LifError] = None
    message: str = ""

    def render(self) -> str:
        if not self.success:
            return self.error
        if self.message:
            return self.message
        return RESULT_SEPARATOR.join(r.summary() for r in self.file_results)


# ----------------------------------------------------------------------
# Executor
# ----------------------------------------------------------------------

class BatchEditExecutor:
    """Plan and apply :class:`BatchEditRequest` objects transactionally.

    Parameters
    ----------
    manager:
        The session's file state manager.
    engine:
        Patch engine used for dry runs and commits.
    path_allowed:
        Predicate deciding whether a path may be edited.  ``None`` allows
        every path.
    color_previews:
        Colour preview diffs with ANSI escapes.
    metrics_enabled, metrics_root, metrics_dir:
        Where (and whether) one metric entry per executed batch is logged.
    """

    def __init__(
        self,
        manager: FileStateManager,
        engine: Optional[PatchEngine] = None,
        path_allowed: Optional[Callable[[str], bool]] = None,
        color_previews: bool = False,
        metrics_enabled: bool = False,
        metrics_root: Optional[str] = None,
        metrics_dir: str = DEFAULT_METRICS_DIR,
    ) -> None:
        self._manager = manager
        self._engine = engine or PatchEngine()
        self._path_allowed = path_allowed
        self._color_previews = color_previews
        self._metrics_enabled = metrics_enabled
        self._metrics_root = metrics_root
        self._metrics_dir = metrics_dir

    @property
    def manager(self) -> FileStateManager:
        return self._manager

    # ------------------------------------------------------------------
    # Phase 1: plan
    # ------------------------------------------------------------------

    def plan(self, request: BatchEditRequest) -> EditPlan:
        """Resolve every sub-request of *request*.

        Raises
        ------
        BatchValidationError
            Carrying one :class:`RequestError` per failed sub-request.
        """
        plan = EditPlan()
        errors: list[RequestError] = []

        with self._manager.exclusive():
            for i, req in enumerate(request.replaces):
                try:
                    state = self._open(req.file_path)
                    plan.add(state, self._plan_replace(state, req), f"Replace request #{i}")
                except LifError as exc:
                    errors.append(RequestError(f"Replace request #{i} (file: '{req.file_path}')", exc))

            for i, req in enumerate(request.inserts):
                try:
                    state = self._open(req.file_path)
                    after, before = self._resolve_position(
                        state, req.at_position, req.context_anchor, "context_anchor",
                    )
                    insert_op = InsertOp(list(req.new_content), after_lid=after, before_lid=before)
                    plan.add(state, insert_op, f"Insert request #{i}")
                except LifError as exc:
                    errors.append(RequestError(f"Insert request #{i} (file: '{req.file_path}')", exc))

            for i, req in enumerate(request.moves):
                try:
                    source, delete_op, dest, insert_op = self._plan_move(req)
                    clashes = plan.conflicts_with(source.path, delete_op.start_lid, delete_op.end_lid)
                    if clashes:
                        raise InvalidRequest(
                            f"{', '.join(clashes)} changes lines inside the moved range. "
                            "Move the lines in a separate call, then edit them at their new location."
                        )
                    plan.add(source, delete_op, f"Move request #{i}")
                    plan.add(dest, insert_op, f"Move request #{i}")
                except LifError as exc:
                    errors.append(RequestError(
                        f"Move request #{i} (source: '{req.source_file_path}', "
                        f"dest: '{req.dest_file_path}')",
                        exc,
                    ))

        if errors:
            raise BatchValidationError(errors)
        return plan

    def _open(self, path: str) -> FileState:
        if self._path_allowed is not None and not self._path_allowed(path):
            raise AccessDenied(path)
        return self._manager.open(path)

    def _plan_replace(self, state: FileState, req: ReplaceRequest) -> PatchOperation:
        if not state.lines:
            if req.anchor_range_begin is None and req.anchor_range_end is None:
                # Replacing the whole of an empty file is an insert at its start
                return InsertOp(list(req.new_content), after_lid=lids.START_OF_FILE)

        if req.anchor_range_begin is not None:
            start = resolve_anchor(state, req.anchor_range_begin, "anchor_range_begin")
        else:
            start = state.lines.first()
        if req.anchor_range_end is not None:
            end = resolve_anchor(state, req.anchor_range_end, "anchor_range_end")
        else:
            end = state.lines.last()

        if start is None or end is None:
            raise InvalidRange(lids.START_OF_FILE, lids.END_OF_FILE, "the file is empty")
        if start > end:
            raise InvalidRange(start, end)
        return ReplaceOp(start, end, list(req.new_content))

    @staticmethod
    def _resolve_position(
        state: FileState,
        position: Position,
        anchor: Optional[Anchor],
        anchor_name: str,
    ) -> tuple[Optional[str], Optional[str]]:
        """Return ``(after_lid, before_lid)`` for an :class:`InsertOp`."""
        if position is Position.START_OF_FILE:
            return lids.START_OF_FILE, None
        if position is Position.END_OF_FILE:
            return lids.END_OF_FILE, None
        if anchor is None:
            raise InvalidRequest(f"`{anchor_name}` is required for `{position.value}` position.")
        lid = resolve_anchor(state, anchor, anchor_name)
        if position is Position.AFTER_ANCHOR:
            return lid, None
        return None, lid

    def _plan_move(self, req: MoveRequest):
        source = self._open(req.source_file_path)
        start = resolve_anchor(source, req.source_range_start_anchor, "source_range_start_anchor")
        end = resolve_anchor(source, req.source_range_end_anchor, "source_range_end_anchor")
        if start > end:
            raise InvalidRange(start, end)
        moved = source.lines_in_range(start, end)

        dest = self._open(req.dest_file_path)
        after, before = self._resolve_position(
            dest, req.dest_at_position, req.dest_context_anchor, "dest_context_anchor",
        )
        for lid in (after, before):
            if dest is source and lid is not None and start <= lid <= end:
                raise InvalidRequest("The move destination lies inside the moved range.")

        return (
            source, ReplaceOp(start, end, []),
            dest, InsertOp(moved, after_lid=after, before_lid=before),
        )

    # ------------------------------------------------------------------
    # Phase 2: dry run
    # ------------------------------------------------------------------

    def _dry_run(self, plan: EditPlan) -> dict[str, LineMap]:
        results: dict[str, LineMap] = {}
        errors: list[RequestError] = []
        for path, operations in plan.planned_ops.items():
            state = plan.states[path]
            try:
                results[path] = self._engine.plan(state, operations)
            except LifError as exc:
                errors.append(RequestError(f"File '{state.display_path()}'", exc))
        if errors:
            raise BatchValidationError(errors)
        return results

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def preview(self, request: BatchEditRequest) -> str:
        """Per-file diffs of *request* without touching anything."""
        if request.is_empty():
            return NO_OPERATIONS
        with self._manager.exclusive():
            plan = self.plan(request)
            new_lines = self._dry_run(plan)

        parts = [f"Edit {len(new_lines)} files:"]
        for path, lines in new_lines.items():
            state = plan.states[path]
            diff = self._engine.diff(state.lines, lines)
            if self._color_previews:
                diff = colorize_diff(diff)
            parts.append(f"{state.display_path()} (diff):\n```\n{diff}\n```\n")
        return "\n".join(parts)

    def execute(self, request: BatchEditRequest) -> BatchResult:
        """Apply *request* atomically and report the outcome.

        Validation and dry-run failures are returned with no file touched.
        A write failure rolls back the files already committed.
        """
        if request.is_empty():
            return BatchResult(success=True, message=NO_OPERATIONS)

        started = time.monotonic()
        with self._manager.exclusive():
            result = self._execute_locked(request)

        if self._metrics_enabled:
            log_edit_metric(
                {
                    "files": len(request.paths()),
                    "operations": request.operation_count,
                    "success": result.success,
                    "lines_added": sum(r.lines_added for r in result.file_results),
                    "lines_removed": sum(r.lines_removed for r in result.file_results),
                    "error_kind": result.error_kind,
                    "duration_ms": round((time.monotonic() - started) * 1000, 2),
                },
                project_root=self._metrics_root,
                metrics_dir=self._metrics_dir,
            )
        return result

    def _execute_locked(self, request: BatchEditRequest) -> BatchResult:
        result = BatchResult()
        try:
            plan = self.plan(request)
            new_lines = self._dry_run(plan)
        except BatchValidationError as exc:
            logger.info("[Batch] Rejected edit with %d error(s)", len(exc.errors))
            result.errors = exc.errors
            result.error = str(exc)
            result.error_kind = exc.kind
            result.exception = exc
            return result

        committed: list[tuple[FileState, StateSnapshot]] = []
        for path, lines in new_lines.items():
            state = plan.states[path]
            snapshot = state.snapshot()
            old_hash = state.short_hash
            try:
                diff = self._engine.commit(state, lines)
            except IoFailure as exc:
                logger.error(
                    "[Batch] Write failed for %s, rolling back %d file(s): %s",
                    path, len(committed), exc,
                )
                self._rollback(committed)
                result.file_results = []
                failure = BatchCommitError(state.display_path(), exc)
                result.error = str(failure)
                result.error_kind = failure.kind
                result.exception = failure
                return result

            committed.append((state, snapshot))
            added, removed = diff_stats(snapshot.lines, state.lines)
            result.file_results.append(FileEditResult(
                path=path,
                display_path=state.display_path(),
                old_hash=old_hash,
                new_hash=state.short_hash,
                diff=diff,
                lines_added=added,
                lines_removed=removed,
            ))
            result.files_modified.append(path)

        result.success = True
        logger.info("[Batch] Applied %d operation(s) to %d file(s)",
                    request.operation_count, len(result.files_modified))
        return result

    def _rollback(self, committed: list[tuple[FileState, StateSnapshot]]) -> None:
        for state, snapshot in reversed(committed):
            try:
                self._engine.revert(state, snapshot)
            except IoFailure as exc:
                # Disk no longer matches the snapshot; force a reload next time
                logger.error("[Batch] Rollback failed for %s: %s", state.path, exc)
                self._manager.invalidate(state.path)
