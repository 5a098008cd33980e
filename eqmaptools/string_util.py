"""Small string helpers: printf-style formatting, splitting and comparison."""

from __future__ import annotations

import re
import string

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

_CONVERSION = re.compile(
    r"%%"
    r"|%(?P<spec>[-+ #0]*(?:\*|\d+)?(?:\.(?:\*|\d+))?)"
    r"(?P<length>hh|h|ll|l|L|q|j|z|t)"
    r"(?P<conv>[diouxXeEfFgGcs])"
)


def _strip_length(match: re.Match[str]) -> str:
    if match.group(0) == "%%":
        return "%%"
    return "%" + match.group("spec") + match.group("conv")


def string_format(fmt: str, *args: object) -> str:
    """Format ``args`` with a printf-style format string.

    C length modifiers such as ``l``, ``ll`` or ``z`` are accepted and ignored.
    A mismatch between the format and the arguments raises ``TypeError`` or
    ``ValueError``.
    """
    return _CONVERSION.sub(_strip_length, fmt) % args


def split_string(text: str, delim: str) -> list[str]:
    """Split ``text`` on a single-character delimiter.

    Empty fields are kept, except that a trailing delimiter does not produce
    a final empty field, and an empty string yields no fields.
    """
    if len(delim) != 1:
        raise ValueError("delimiter must be a single character")
    parts = text.split(delim)
    if parts[-1] == "":
        parts.pop()
    return parts


def strings_equal(a: str, b: str) -> bool:
    """Compare two strings ignoring ASCII letter case."""
    return len(a) == len(b) and a.translate(_ASCII_LOWER) == b.translate(_ASCII_LOWER)