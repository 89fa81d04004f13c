"""
String helpers: Nelua literal encoding and comment formatting.
"""

from __future__ import annotations

import re
import textwrap
from typing import List

# Numbers as the visual editor understands them: optional minus, digits,
# optional fraction. No exponents, no leading plus.
_NUMBER_RE = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")


def quote(text: str) -> str:
    """
    Encode text as a single-quoted Nelua string literal.

    Newlines become a backslash-newline continuation so the literal remains a
    single token.
    """
    text = (
        text.replace("\\", "\\\\")
        .replace("\n", "\\\n")
        .replace("'", "\\'")
    )
    return "'" + text + "'"


def multiline_quote(text: str) -> str:
    """Quote each line separately and glue them with explicit newline literals."""
    lines = [quote(line) for line in text.split("\n")]
    return " .. '\\n' ..\n".join(lines)


def prefix_lines(text: str, prefix: str) -> str:
    """Prepend `prefix` to every line; a single trailing newline is left alone."""
    if text.endswith("\n"):
        return prefix + text[:-1].replace("\n", "\n" + prefix) + "\n"
    return prefix + text.replace("\n", "\n" + prefix)


def wrap(text: str, limit: int) -> str:
    """Word-wrap each paragraph of `text` to at most `limit` columns."""
    paragraphs: List[str] = []
    for paragraph in text.split("\n"):
        paragraphs.append(textwrap.fill(paragraph, width=max(limit, 1)) if paragraph else "")
    return "\n".join(paragraphs)


def is_number(text: str) -> bool:
    return bool(_NUMBER_RE.match(text))


def number_literal(value: float) -> str:
    """Render a number the way the editor displays it: 3 not 3.0, 0.5 stays 0.5."""
    if value != value or value in (float("inf"), float("-inf")):
        raise ValueError(f"Cannot render non-finite number {value!r}")
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


__all__ = ["is_number", "multiline_quote", "number_literal", "prefix_lines", "quote", "wrap"]
