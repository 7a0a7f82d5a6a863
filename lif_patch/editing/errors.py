"""
Error kinds raised by the LIF editing subsystem.

Every error carries structured attributes (path, identifier, expected and
found content, ...) so callers can react to the kind of failure instead of
parsing messages.
"""

from __future__ import annotations


class LifError(Exception):
    """Base class for all LIF editing failures."""

    kind = "lif_error"


class NotFound(LifError):
    kind = "not_found"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path does not exist: {path}")


class NotAFile(LifError):
    kind = "not_a_file"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path is not a file: {path}")


class UnknownIdentifier(LifError):
    """A line identifier is malformed or absent from the file."""

    kind = "unknown_identifier"

    def __init__(self, lid: str, path: str | None = None, hint: str = "") -> None:
        self.lid = lid
        self.path = path
        self.hint = hint
        message = f"LID '{lid}' not found"
        if path:
            message += f" in file '{path}'"
        message += "."
        if hint:
            message += f"\n{hint}"
        super().__init__(message)


class InvalidRange(LifError):
    kind = "invalid_range"

    def __init__(self, start, end, reason: str = "") -> None:
        self.start = start
        self.end = end
        message = f"Invalid range: start '{start}' comes after end '{end}'"
        if reason:
            message = f"Invalid range '{start}'-'{end}': {reason}"
        super().__init__(message)


class AnchorMismatch(LifError):
    """The caller's expected line content no longer matches the file."""

    kind = "anchor_mismatch"

    def __init__(
        self,
        lid: str,
        expected: str,
        found: str,
        path: str | None = None,
        role: str = "anchor",
    ) -> None:
        self.lid = lid
        self.expected = expected
        self.found = found
        self.path = path
        self.role = role
        super().__init__(
            f"{role} content mismatch for LID '{lid}'.\n"
            "The line content provided in the request does not match the "
            "current content of the file.\n\n"
            f"Expected content (from the request):\n  > {expected}\n\n"
            f"Actual content (in the file):\n  > {found}"
        )


class IdentifierSpaceExhausted(LifError):
    """No identifier fits between two bounds.

    The dense allocator always finds room, so this only surfaces if the
    ordering invariant of a file has already been broken.
    """

    kind = "identifier_space_exhausted"

    def __init__(self, lower: str | None, upper: str | None) -> None:
        self.lower = lower
        self.upper = upper
        super().__init__(
            f"Cannot allocate an identifier between {lower!r} and {upper!r}."
        )


class IoFailure(LifError):
    kind = "io_failure"

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"I/O failure on '{path}': {reason}")


class AccessDenied(LifError):
    kind = "access_denied"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Operation on path '{path}' is not allowed. "
            "It is not within any of the accessible paths."
        )


class InvalidRequest(LifError):
    """Tool arguments or patch JSON do not have the expected shape."""

    kind = "invalid_request"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class BatchValidationError(LifError):
    """One or more sub-requests of a batch edit failed validation."""

    kind = "batch_validation"

    def __init__(self, errors: list) -> None:
        self.errors = list(errors)
        lines = "\n- ".join(str(e) for e in self.errors)
        super().__init__(
            f"Validation failed with {len(self.errors)} error(s):\n- {lines}"
        )


class BatchCommitError(LifError):
    """Writing one file of a batch failed; files already written were restored."""

    kind = IoFailure.kind

    def __init__(self, display_path: str, cause: LifError) -> None:
        self.display_path = display_path
        self.cause = cause
        super().__init__(f"File: {display_path}\nError: {cause}")
