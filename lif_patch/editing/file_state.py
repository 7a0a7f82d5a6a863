"""
File state — the in-memory Line-Indexed File (LIF) model of one file.

Each line carries a stable identifier (see :mod:`.lid`).  The state keeps
the lines in identifier order, remembers whether the file ended with a line
break, and fingerprints the whole thing with a SHA-1 hash that callers use
as a version identifier.
"""

from __future__ import annotations

import bisect
import hashlib
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from . import lid as lids
from .errors import InvalidRange, UnknownIdentifier

EMPTY_FILE_MARKER = "[File is empty]"
OUT_OF_RANGE_MARKER = "[Requested lines are beyond the end of the file]"


class LineMap:
    """Ordered ``identifier -> content`` container.

    Identifiers are kept sorted so iteration always follows file order.
    """

    def __init__(self) -> None:
        self._lids: list[str] = []
        self._content: dict[str, str] = {}

    @classmethod
    def from_items(cls, items: Iterable[tuple[str, str]]) -> "LineMap":
        line_map = cls()
        for lid, content in items:
            line_map.insert(lid, content)
        return line_map

    def copy(self) -> "LineMap":
        clone = LineMap()
        clone._lids = list(self._lids)
        clone._content = dict(self._content)
        return clone

    def __len__(self) -> int:
        return len(self._lids)

    def __contains__(self, lid: object) -> bool:
        return lid in self._content

    def __iter__(self) -> Iterator[str]:
        return iter(self._lids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineMap):
            return NotImplemented
        return self._lids == other._lids and self._content == other._content

    def __repr__(self) -> str:
        return f"LineMap({list(self.items())!r})"

    def items(self) -> Iterator[tuple[str, str]]:
        for lid in self._lids:
            yield lid, self._content[lid]

    def contents(self) -> list[str]:
        return [self._content[lid] for lid in self._lids]

    def get(self, lid: str) -> Optional[str]:
        return self._content.get(lid)

    def first(self) -> Optional[str]:
        return self._lids[0] if self._lids else None

    def last(self) -> Optional[str]:
        return self._lids[-1] if self._lids else None

    def position(self, lid: str) -> int:
        """0-based position of *lid*; the identifier must be present."""
        i = bisect.bisect_left(self._lids, lid)
        if i == len(self._lids) or self._lids[i] != lid:
            raise KeyError(lid)
        return i

    def at(self, position: int) -> str:
        return self._lids[position]

    def predecessor(self, lid: str) -> Optional[str]:
        """Identifier sorting immediately before *lid* (present or not)."""
        i = bisect.bisect_left(self._lids, lid)
        return self._lids[i - 1] if i > 0 else None

    def successor(self, lid: str) -> Optional[str]:
        """Identifier sorting immediately after *lid* (present or not)."""
        i = bisect.bisect_right(self._lids, lid)
        return self._lids[i] if i < len(self._lids) else None

    def insert(self, lid: str, content: str) -> None:
        if lid in self._content:
            raise ValueError(f"Duplicate line identifier: {lid}")
        bisect.insort(self._lids, lid)
        self._content[lid] = content

    def remove_span(self, start_lid: str, end_lid: str) -> list[tuple[str, str]]:
        """Remove every line whose identifier lies in ``[start_lid, end_lid]``."""
        lo = bisect.bisect_left(self._lids, start_lid)
        hi = bisect.bisect_right(self._lids, end_lid)
        removed = [(lid, self._content.pop(lid)) for lid in self._lids[lo:hi]]
        del self._lids[lo:hi]
        return removed


@dataclass
class RangeSpec:
    """An inclusive, 1-based line interval."""
    start_line: int
    end_line: int


def merge_ranges(ranges: Iterable[RangeSpec]) -> list[RangeSpec]:
    """Collapse overlapping or adjacent intervals.

    Intervals are sorted by start line (ties broken by end line); a range
    starting at most one line after the previous one ends is folded into it.
    """
    ordered = sorted(
        (RangeSpec(r.start_line, r.end_line) for r in ranges),
        key=lambda r: (r.start_line, r.end_line),
    )
    if not ordered:
        return []

    merged = [ordered[0]]
    for nxt in ordered[1:]:
        last = merged[-1]
        if nxt.start_line <= last.end_line + 1:
            last.end_line = max(last.end_line, nxt.end_line)
        else:
            merged.append(nxt)
    return merged


@dataclass(frozen=True)
class StateSnapshot:
    lines: LineMap
    ends_with_newline: bool


class FileState:
    """In-memory LIF model of a single file.

    Attributes
    ----------
    path:
        Canonical absolute path of the file.
    lines:
        :class:`LineMap` of identifier -> content, in file order.
    ends_with_newline:
        Whether the text ended with a line break.
    content_hash:
        SHA-1 of :meth:`canonical_rendering`.
    """

    def __init__(self, path: str, lines: LineMap, ends_with_newline: bool = False) -> None:
        self.path = path
        self.lines = lines
        self.ends_with_newline = ends_with_newline and len(lines) > 0
        self.content_hash = self._compute_hash()

    @classmethod
    def from_text(cls, path: str, text: str) -> "FileState":
        """Build a state from raw file text, assigning fresh identifiers."""
        if text == "":
            parts: list[str] = []
            ends_with_newline = False
        else:
            # Split on "\n" only so "\r" survives inside line content
            parts = text.split("\n")
            ends_with_newline = parts[-1] == ""
            if ends_with_newline:
                parts.pop()

        keys = lids.initial_keys(len(parts))
        lines = LineMap.from_items(
            (lids.format_lid(key), content) for key, content in zip(keys, parts)
        )
        return cls(path, lines, ends_with_newline)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def full_content(self) -> str:
        """Reconstruct the exact file text."""
        if not self.lines:
            return ""
        text = "\n".join(self.lines.contents())
        if self.ends_with_newline:
            text += "\n"
        return text

    def canonical_rendering(self) -> str:
        """Deterministic text the content hash is computed from."""
        body = "\n".join(f"{lid}: {content}" for lid, content in self.lines.items())
        marker = "[EOF newline]" if self.ends_with_newline else "[EOF no-newline]"
        return f"{body}\n{marker}"

    @property
    def short_hash(self) -> str:
        return self.content_hash[:8]

    def display_path(self) -> str:
        """Path relative to the working directory when the file lives under it."""
        cwd = os.getcwd()
        if self.path.startswith(cwd.rstrip(os.sep) + os.sep):
            return os.path.relpath(self.path, cwd)
        return self.path

    def display(self, ranges: Optional[Iterable[RangeSpec]] = None) -> str:
        """Render the file (or the requested line ranges) in LIF format."""
        total = len(self.lines)
        prefix = f"File: {self.display_path()} | Hash: {self.short_hash}"

        if total == 0:
            return f"{prefix} | Lines: 0-0/0\n{EMPTY_FILE_MARKER}"

        requested = list(ranges) if ranges else [RangeSpec(1, total)]
        for r in requested:
            if r.start_line < 1 or r.end_line < r.start_line:
                raise InvalidRange(r.start_line, r.end_line, "line ranges are 1-based and inclusive")

        selected = []
        for r in merge_ranges(requested):
            if r.start_line > total:
                continue
            selected.append(RangeSpec(r.start_line, min(r.end_line, total)))

        if not selected:
            return f"{prefix} | Lines: 0-0/{total}\n{OUT_OF_RANGE_MARKER}"

        range_list = ", ".join(f"{r.start_line}-{r.end_line}" for r in selected)
        body: list[str] = []
        for r in selected:
            for number in range(r.start_line, r.end_line + 1):
                lid = self.lines.at(number - 1)
                body.append(f"{number:<4} {lid}: {self.lines.get(lid)}")

        return f"{prefix} | Lines: {range_list}/{total}\n" + "\n".join(body)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def lids(self) -> list[str]:
        return list(self.lines)

    def content_of(self, lid: str) -> str:
        content = self.lines.get(lid)
        if content is None:
            raise UnknownIdentifier(lid, self.path)
        return content

    def line_number(self, lid: str) -> int:
        """1-based line number of *lid*."""
        try:
            return self.lines.position(lid) + 1
        except KeyError:
            raise UnknownIdentifier(lid, self.path) from None

    def lines_in_range(self, start_lid: str, end_lid: str) -> list[str]:
        """Contents of the lines from *start_lid* to *end_lid*, inclusive.

        *start_lid* may be the start-of-file sentinel and *end_lid* the
        end-of-file sentinel.
        """
        if not self.lines and start_lid == lids.START_OF_FILE and end_lid == lids.END_OF_FILE:
            return []
        lo = 0 if start_lid == lids.START_OF_FILE else self.line_number(start_lid) - 1
        hi = len(self.lines) - 1 if end_lid == lids.END_OF_FILE else self.line_number(end_lid) - 1
        if lo > hi:
            raise InvalidRange(start_lid, end_lid)
        return [self.lines.get(self.lines.at(i)) for i in range(lo, hi + 1)]

    # ------------------------------------------------------------------
    # Mutation (driven by the patch engine)
    # ------------------------------------------------------------------

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(self.lines, self.ends_with_newline)

    def replace_lines(self, lines: LineMap, ends_with_newline: Optional[bool] = None) -> None:
        """Swap in a new line map and recompute the hash."""
        if ends_with_newline is None:
            ends_with_newline = self.ends_with_newline
        self.lines = lines
        self.ends_with_newline = ends_with_newline and len(lines) > 0
        self.content_hash = self._compute_hash()

    def restore(self, snapshot: StateSnapshot) -> None:
        self.replace_lines(snapshot.lines, snapshot.ends_with_newline)

    def _compute_hash(self) -> str:
        return hashlib.sha1(self.canonical_rendering().encode("utf-8")).hexdigest()

    def __repr__(self) -> str:
        return f"FileState(path={self.path!r}, lines={len(self.lines)}, hash={self.short_hash})"
