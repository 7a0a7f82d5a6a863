"""
Line identifiers — dense fractional keys that never run out of room.

A key is a string over a 62-symbol alphabet read as the digits of a fraction
in ``[0, 1)``: ``"V"`` is 31/62, ``"V1"`` is slightly larger, and so on.
Plain string comparison matches numeric order as long as no key ends with
the zero digit, which every key produced here respects.  A new key between
any two keys is always obtainable by extending precision.
"""

from __future__ import annotations

from .errors import IdentifierSpaceExhausted, InvalidRange, UnknownIdentifier

DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
BASE = len(DIGITS)
_DIGIT_VALUE = {ch: i for i, ch in enumerate(DIGITS)}

LID_PREFIX = "lid-"
START_OF_FILE = "_START_OF_FILE_"
END_OF_FILE = "_END_OF_FILE_"


def is_sentinel(value: str) -> bool:
    return value in (START_OF_FILE, END_OF_FILE)


def is_valid_key(key: str) -> bool:
    return bool(key) and key[-1] != DIGITS[0] and all(ch in _DIGIT_VALUE for ch in key)


def format_lid(key: str) -> str:
    """Serialize a raw key as an identifier string (``lid-<key>``)."""
    return LID_PREFIX + key


def parse_lid(lid: str) -> str:
    """Return the raw key of an identifier string.

    Raises
    ------
    UnknownIdentifier
        If *lid* is not a well-formed identifier.
    """
    if not isinstance(lid, str) or not lid.startswith(LID_PREFIX):
        raise UnknownIdentifier(
            str(lid), hint=f"Identifiers must start with '{LID_PREFIX}'."
        )
    key = lid[len(LID_PREFIX):]
    if not is_valid_key(key):
        raise UnknownIdentifier(lid, hint="Malformed identifier.")
    return key


def _midpoint(lower: str, upper: str | None) -> str:
    """Key strictly between *lower* and *upper* (``None`` = open)."""
    if upper is not None:
        # Skip the shared prefix, reading missing lower digits as zero
        n = 0
        while n < len(upper) and (lower[n] if n < len(lower) else DIGITS[0]) == upper[n]:
            n += 1
        if n > 0:
            return upper[:n] + _midpoint(lower[n:], upper[n:])

    digit_lo = _DIGIT_VALUE[lower[0]] if lower else 0
    digit_hi = _DIGIT_VALUE[upper[0]] if upper is not None else BASE

    if digit_hi - digit_lo > 1:
        return DIGITS[(digit_lo + digit_hi + 1) // 2]

    # Leading digits are consecutive
    if upper is not None and len(upper) > 1:
        return upper[0]
    return DIGITS[digit_lo] + _midpoint(lower[1:], None)


def key_between(lower: str | None, upper: str | None) -> str:
    """Return a single key strictly between *lower* and *upper*.

    Either bound may be ``None`` to mean the start or end of the key space.
    """
    lo = lower or ""
    if upper is not None and lo >= upper:
        raise InvalidRange(lower, upper, "lower bound must sort before upper bound")

    key = _midpoint(lo, upper)
    if key <= lo or (upper is not None and key >= upper):
        raise IdentifierSpaceExhausted(lower, upper)
    return key


def allocate(lower: str | None, upper: str | None, count: int) -> list[str]:
    """Return *count* ordered keys strictly between *lower* and *upper*.

    Keys are placed by recursive bisection so their length grows with the
    logarithm of *count* rather than linearly.
    """
    if count <= 0:
        return []
    half = count // 2
    middle = key_between(lower, upper)
    return (
        allocate(lower, middle, half)
        + [middle]
        + allocate(middle, upper, count - half - 1)
    )


def initial_keys(count: int) -> list[str]:
    """Well-spaced keys for the lines of a freshly loaded file."""
    return allocate(None, None, count)
