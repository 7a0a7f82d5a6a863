"""Line-indexed file editing — stable line identifiers, transactional patches."""

from .errors import (
    LifError, NotFound, NotAFile, UnknownIdentifier, InvalidRange,
    AnchorMismatch, IdentifierSpaceExhausted, IoFailure, AccessDenied,
    InvalidRequest, BatchValidationError, BatchCommitError,
)
from .file_state import FileState, LineMap, RangeSpec, merge_ranges
from .patch import InsertOp, ReplaceOp, decode_operations, START_OF_FILE, END_OF_FILE
from .patch_engine import PatchEngine
from .diff_renderer import render_diff, colorize_diff
from .anchors import Anchor, resolve_anchor
from .file_state_manager import FileStateManager
from .batch_executor import (
    BatchEditExecutor, BatchEditRequest, BatchResult, EditPlan,
    InsertRequest, ReplaceRequest, MoveRequest, Position, decode_batch_request,
)
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "LifError", "NotFound", "NotAFile", "UnknownIdentifier", "InvalidRange",
    "AnchorMismatch", "IdentifierSpaceExhausted", "IoFailure", "AccessDenied",
    "InvalidRequest", "BatchValidationError", "BatchCommitError",
    "FileState", "LineMap", "RangeSpec", "merge_ranges",
    "InsertOp", "ReplaceOp", "decode_operations", "START_OF_FILE", "END_OF_FILE",
    "PatchEngine",
    "render_diff", "colorize_diff",
    "Anchor", "resolve_anchor",
    "FileStateManager",
    "BatchEditExecutor", "BatchEditRequest", "BatchResult", "EditPlan",
    "InsertRequest", "ReplaceRequest", "MoveRequest", "Position", "decode_batch_request",
    "log_edit_metric", "read_edit_stats",
]
