"""
Unsafe raw HTML rule.

Flags every `{@html ...}` insertion unless there is positive evidence that
it is safe:

- the expression is a direct call to an allow-listed sanitizer
  (`{@html DOMPurify.sanitize(x)}` does not count, `{@html sanitize(x)}` does
  when "sanitize" is allowed), or
- a suppression comment sits right next to it in the same fragment:

    {@html trusted}<!-- svelte-ignore unsafe_html -->

    <!-- svelte-ignore unsafe_html -->
    {@html trusted}

Sanitizers are matched by name only; aliases and wrappers are not resolved.
"""

from collections.abc import Iterable, Sequence

from svelte_unsafe_html.models import Finding
from svelte_unsafe_html.observability import get_logger
from svelte_unsafe_html.template.nodes import Comment, NodeKind, RawMustacheTag, TemplateNode, Text

logger = get_logger(__name__)

RULE_ID = "unsafe_html"
MESSAGE = "Unsafe raw HTML insertion without sanitizer"


def detect(root: TemplateNode, filename: str, allow_list: Iterable[str] = ()) -> list[Finding]:
    """
    Find unsafe raw HTML insertions in a template tree.

    Args:
        root: Tree root (a Fragment, any container, or a bare RawMustacheTag)
        filename: Label for the findings
        allow_list: Trusted sanitizer function names

    Returns:
        Findings in source order (depth-first, left-to-right)
    """
    allowed = frozenset(allow_list)
    findings: list[Finding] = []

    # No siblings around a bare insertion: only the sanitizer check applies
    if root.kind is NodeKind.RAW_HTML:
        if not is_sanitized(root, allowed):
            findings.append(_report(root, filename))
        return findings

    # (siblings, next index) frames; the continuation of a scope is pushed
    # before the scopes of the current child so those are walked first
    stack: list[tuple[Sequence[TemplateNode], int]] = [(fragment.children, 0) for fragment in reversed(root.fragments())]

    while stack:
        siblings, index = stack.pop()
        if index >= len(siblings):
            continue

        node = siblings[index]
        stack.append((siblings, index + 1))

        if node.is_container:
            stack.extend((fragment.children, 0) for fragment in reversed(node.fragments()))
        elif node.kind is NodeKind.RAW_HTML:
            if is_sanitized(node, allowed) or is_suppressed(siblings, index):
                continue
            findings.append(_report(node, filename))

    return findings


def is_sanitized(node: RawMustacheTag, allow_list: Iterable[str]) -> bool:
    """
    Check whether the insertion is a direct call to an allowed sanitizer.

    Only `name(...)` with a plain identifier callee counts. Member callees,
    computed callees, tagged templates and optional calls do not.
    """
    expression = node.expression
    if expression is None or not expression.is_call:
        return False

    callee = expression.callee
    if callee is None or callee.type != "identifier":
        return False
    return callee.name in allow_list


def is_suppressed(siblings: Sequence[TemplateNode], index: int, rule_id: str = RULE_ID) -> bool:
    """
    Check for a suppression comment adjacent to siblings[index].

    Positions, first match wins:
        1. directly after
        2. after one whitespace-only text node
        3. directly before
        4. before one whitespace-only text node
    """
    following = _at(siblings, index + 1)
    if _suppresses(following, rule_id):
        return True
    if _is_blank(following) and _suppresses(_at(siblings, index + 2), rule_id):
        return True

    preceding = _at(siblings, index - 1)
    if _suppresses(preceding, rule_id):
        return True
    return _is_blank(preceding) and _suppresses(_at(siblings, index - 2), rule_id)


def _at(siblings: Sequence[TemplateNode], index: int) -> TemplateNode | None:
    # Negative indices would wrap around
    if 0 <= index < len(siblings):
        return siblings[index]
    return None


def _suppresses(node: TemplateNode | None, rule_id: str) -> bool:
    return isinstance(node, Comment) and rule_id in node.ignores


def _is_blank(node: TemplateNode | None) -> bool:
    return isinstance(node, Text) and node.is_whitespace


def _report(node: RawMustacheTag, filename: str) -> Finding:
    loc = node.expression.loc
    finding = Finding(filename=filename, start=loc.start, end=loc.end, message=MESSAGE)
    logger.debug(
        "unsafe_html_detected",
        filename=filename,
        line=loc.start.line,
        column=loc.start.column,
        expression=node.expression.text,
    )
    return finding
