"""
Anchor resolution — checks that a caller's ``(lid, line_content)`` pair
still describes the file.

The caller only ever sees a rendered snapshot of a file.  An anchor proves
its view is current: the identifier must exist and the line behind it must
still hold exactly the content the caller saw.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from . import lid as lids
from .errors import AnchorMismatch, InvalidRequest, UnknownIdentifier
from .file_state import FileState

logger = logging.getLogger(__name__)

# Lines of context around a relocated line in an "unknown LID" hint
_HINT_BEFORE = 5
_HINT_AFTER = 4


@dataclass
class Anchor:
    lid: str
    line_content: str

    @classmethod
    def from_dict(cls, raw, field_name: str = "anchor") -> "Anchor":
        if not isinstance(raw, dict):
            raise InvalidRequest(f"`{field_name}` must be an object with 'lid' and 'line_content'.")
        lid = raw.get("lid")
        content = raw.get("line_content")
        if not isinstance(lid, str) or not isinstance(content, str):
            raise InvalidRequest(f"`{field_name}` needs string fields 'lid' and 'line_content'.")
        return cls(lid=lid, line_content=content)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def relocation_hint(state: FileState, expected: str) -> str:
    """Describe where *expected* content lives now, or ``""`` if nowhere.

    Lines are compared with whitespace runs collapsed so a reindented line
    is still found.
    """
    target = _collapse(expected)
    found = None
    for position, (lid, content) in enumerate(state.lines.items()):
        if _collapse(content) == target:
            found = (position + 1, lid)
            break
    if found is None:
        return ""

    line_number, new_lid = found
    total = len(state.lines)
    first = max(1, line_number - _HINT_BEFORE)
    last = min(total, line_number + _HINT_AFTER)

    context = []
    for number in range(first, last + 1):
        lid = state.lines.at(number - 1)
        indicator = ">" if number == line_number else " "
        context.append(f"{indicator} {number:<4} {lid}: {state.lines.get(lid)}")

    return (
        f"However, the line content was found with a new LID '{new_lid}'. "
        "The file was likely modified externally.\n"
        "Please use the new LIDs from the context below to form your request.\n\n"
        "Context around the found line:\n---\n" + "\n".join(context) + "\n---"
    )


def resolve_anchor(state: FileState, anchor: Anchor, role: str = "anchor") -> str:
    """Validate *anchor* against *state* and return its identifier.

    Raises
    ------
    UnknownIdentifier
        The identifier is malformed or not present in the file.  When the
        expected content exists elsewhere, the error carries a hint with
        its new identifier.
    AnchorMismatch
        The line exists but its content differs from ``anchor.line_content``.
    """
    if lids.is_sentinel(anchor.lid):
        raise UnknownIdentifier(
            anchor.lid, state.path,
            hint=f"`{role}` must name a line; use a position keyword for file boundaries.",
        )
    lids.parse_lid(anchor.lid)

    actual = state.lines.get(anchor.lid)
    if actual is None:
        hint = relocation_hint(state, anchor.line_content)
        logger.debug("[LIF] Unknown %s %s in %s (relocated: %s)",
                     role, anchor.lid, state.path, bool(hint))
        raise UnknownIdentifier(anchor.lid, state.path, hint=hint)

    if actual != anchor.line_content:
        raise AnchorMismatch(anchor.lid, anchor.line_content, actual, state.path, role)
    return anchor.lid
