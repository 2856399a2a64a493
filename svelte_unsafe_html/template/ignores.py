"""
Suppression directives in HTML comments.

Recognised forms (rule names separated by whitespace and/or commas):
    <!-- svelte-ignore unsafe_html -->
    <!-- svelte-ignore a11y_missing_attribute, unsafe_html -->
    <!-- suppress-rule: unsafe_html -->

Rule names are normalised with `-` → `_`, so `unsafe-html` matches too.
Anything else yields an empty set.
"""

import re

_DIRECTIVES = (
    re.compile(r"^\s*svelte-ignore\s+(?P<rules>[\s\S]+?)\s*$"),
    re.compile(r"^\s*suppress-rule:\s*(?P<rules>[\s\S]+?)\s*$"),
)
_SEPARATOR = re.compile(r"[\s,]+")
_RULE_NAME = re.compile(r"^[A-Za-z][\w-]*$")


def extract_ignores(comment_data: str) -> frozenset[str]:
    """
    Parse the rule names a comment suppresses.

    Args:
        comment_data: Comment text between `<!--` and `-->`

    Returns:
        Normalised rule names (empty if the comment is not a directive)
    """
    for directive in _DIRECTIVES:
        match = directive.match(comment_data)
        if match:
            names = [name for name in _SEPARATOR.split(match.group("rules")) if name]
            return frozenset(name.replace("-", "_") for name in names if _RULE_NAME.match(name))
    return frozenset()
