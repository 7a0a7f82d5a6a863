"""
Diff renderer — identifier-aware, context-grouped diffs of two line maps.

Lines are matched by identifier rather than by content, so a diff reports
exactly which lines a patch removed, added or rewrote.  Lines whose only
change is whitespace are shown as neutral context.
"""

from __future__ import annotations


NO_CHANGES = "No changes detected."
HUNK_SEPARATOR = "..."
DEFAULT_CONTEXT_LINES = 2

_SAME = "same"
_WHITESPACE = "whitespace"
_MODIFIED = "modified"
_REMOVED = "removed"
_ADDED = "added"


def _squash_whitespace(text: str) -> str:
    return "".join(text.split())


def _classify(old: dict[str, str], new: dict[str, str], lid: str) -> str:
    if lid not in new:
        return _REMOVED
    if lid not in old:
        return _ADDED
    if old[lid] == new[lid]:
        return _SAME
    if _squash_whitespace(old[lid]) == _squash_whitespace(new[lid]):
        return _WHITESPACE
    return _MODIFIED


def _windows(changed: list[int], context: int, size: int) -> list[tuple[int, int]]:
    """Context windows around changed positions, merged when they touch."""
    windows: list[tuple[int, int]] = []
    for pos in changed:
        start, end = max(0, pos - context), min(size - 1, pos + context)
        if windows and start <= windows[-1][1] + 1:
            windows[-1] = (windows[-1][0], max(windows[-1][1], end))
        else:
            windows.append((start, end))
    return windows


def _as_dict(lines) -> dict[str, str]:
    return dict(lines.items() if hasattr(lines, "items") else lines)


def render_diff(old_lines, new_lines, context: int = DEFAULT_CONTEXT_LINES) -> str:
    """Render the difference between two ordered ``lid -> content`` sequences.

    Parameters
    ----------
    old_lines, new_lines:
        A :class:`~.file_state.LineMap` or any iterable of ``(lid, content)``
        pairs in identifier order.
    context:
        Unchanged lines shown on each side of a change.

    Returns
    -------
    str
        The diff text, or ``"No changes detected."``.
    """
    old = _as_dict(old_lines)
    new = _as_dict(new_lines)
    if old == new:
        return NO_CHANGES

    all_lids = sorted(set(old) | set(new))
    status = [_classify(old, new, lid) for lid in all_lids]
    changed = [i for i, s in enumerate(status) if s != _SAME]

    out: list[str] = []
    for block_idx, (start, end) in enumerate(_windows(changed, context, len(all_lids))):
        if block_idx > 0:
            out.append(HUNK_SEPARATOR)

        removed: list[str] = []
        added: list[str] = []

        def flush() -> None:
            out.extend(removed)
            out.extend(added)
            removed.clear()
            added.clear()

        for i in range(start, end + 1):
            lid, kind = all_lids[i], status[i]
            if kind in (_SAME, _WHITESPACE):
                flush()
                out.append(f"  {lid}: {new[lid]}")
                continue
            if kind in (_REMOVED, _MODIFIED):
                removed.append(f"- {lid}: {old[lid]}")
            if kind in (_ADDED, _MODIFIED):
                added.append(f"+ {lid}: {new[lid]}")
        flush()

    return "\n".join(out)


def diff_stats(old_lines, new_lines) -> tuple[int, int]:
    """Return ``(lines_added, lines_removed)`` counted by identifier."""
    old = _as_dict(old_lines)
    new = _as_dict(new_lines)
    added = sum(1 for lid in new if lid not in old or old[lid] != new[lid])
    removed = sum(1 for lid in old if lid not in new or old[lid] != new[lid])
    return added, removed


def colorize_diff(diff_text: str) -> str:
    """Add ANSI colors to a rendered diff for human review.

    Green for additions (+), red for removals (-), dim for separators.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        if line.startswith("+ "):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("- "):
            colored.append(f"\033[31m{line}\033[0m")  # red
        elif line == HUNK_SEPARATOR:
            colored.append(f"\033[2m{line}\033[0m")  # dim
        else:
            colored.append(line)
    return "\n".join(colored)
