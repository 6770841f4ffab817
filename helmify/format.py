"""Text clean-up helpers for rendered templates."""

from __future__ import annotations

import re

_TRAILING_WHITESPACE = re.compile(r"([\t\n\f\r ]+)(\n|\Z)")


def fix_unterminated_quotes(text: str) -> str:
    """Join a line with an odd number of double quotes to the line that follows it."""
    lines = text.split("\n")
    last = len(lines) - 1
    parts = []
    unterminated = False
    for index, line in enumerate(lines):
        if unterminated:
            line = " " + line.strip()
            unterminated = False
        else:
            unterminated = line.count('"') % 2 != 0
        parts.append(line)
        if not unterminated and index != last:
            parts.append("\n")
    return "".join(parts)


def remove_trailing_whitespaces(text: str) -> str:
    """Strip whitespace at the end of every line."""
    return _TRAILING_WHITESPACE.sub(r"\2", text)