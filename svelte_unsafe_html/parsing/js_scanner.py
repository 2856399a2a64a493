"""
Lexical scanner for JavaScript embedded in template tags.

Finds the end of a `{...}` tag body and top-level keywords such as
`as` / `then` without a full parse. String literals, template literals
(including `${...}` substitutions) and comments are skipped, so braces
inside them never terminate a tag.

Regular-expression literals are not recognised; a `}` inside a regex
literal ends the tag early, in which case expression validation reports
the tag as invalid.
"""

import re
from collections.abc import Iterator

_CLOSERS = {"(": ")", "[": "]", "{": "}"}
_SUBSTITUTION = "${"


def _skip_quoted(text: str, index: int) -> int:
    """Return the index just past the string literal starting at index."""
    quote = text[index]
    i = index + 1
    n = len(text)
    while i < n:
        char = text[i]
        if char == "\\":
            i += 2
            continue
        if char == quote or char == "\n":
            return i + 1
        i += 1
    return n


def iter_code(text: str, start: int = 0) -> Iterator[tuple[int, int]]:
    """
    Yield (index, depth) for every code character outside literals and comments.

    depth is the bracket nesting level before the character is applied,
    so the closing brace of a tag body is yielded with depth 0.
    """
    closers: list[str] = []
    in_template = False
    i = start
    n = len(text)

    while i < n:
        if in_template:
            char = text[i]
            if char == "\\":
                i += 2
            elif char == "`":
                in_template = False
                i += 1
            elif text.startswith(_SUBSTITUTION, i):
                closers.append(_SUBSTITUTION)
                in_template = False
                i += 2
            else:
                i += 1
            continue

        char = text[i]
        if char in "\"'":
            i = _skip_quoted(text, i)
            continue
        if char == "`":
            in_template = True
            i += 1
            continue
        if text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close == -1 else close + 2
            continue

        yield i, len(closers)

        if char in _CLOSERS:
            closers.append(_CLOSERS[char])
        elif char in ")]}" and closers:
            if closers.pop() == _SUBSTITUTION:
                in_template = True
        i += 1


def find_closing_brace(text: str, start: int) -> int | None:
    """
    Find the `}` that closes a tag body.

    Args:
        text: Full template text
        start: Index just after the opening `{`

    Returns:
        Index of the closing brace, or None if the tag is unterminated
    """
    for index, depth in iter_code(text, start):
        if depth == 0 and text[index] == "}":
            return index
    return None


def find_top_level(text: str, pattern: re.Pattern[str], start: int = 0) -> re.Match[str] | None:
    """
    Find the first match of pattern that begins at bracket depth 0.

    Used to split tag bodies such as `items as item` or `promise then value`.
    """
    for index, depth in iter_code(text, start):
        if depth != 0:
            continue
        match = pattern.match(text, index)
        if match:
            return match
    return None
