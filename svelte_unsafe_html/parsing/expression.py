"""
Tag expression parsing with tree-sitter.

Expressions inside `{...}` tags are parsed as JavaScript (or TypeScript for
components with `<script lang="ts">`). Only the shape needed by the rules is
kept: the node type, the source location, identifier names and direct-call
callees.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from svelte_unsafe_html.exceptions import TemplateParseError
from svelte_unsafe_html.models import SourceLocation
from svelte_unsafe_html.parsing.parser_registry import ParserRegistry, get_registry
from svelte_unsafe_html.parsing.source_file import SourceFile

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

# Node types that never carry meaning for the expression itself
_TRIVIA = frozenset(["comment", "html_comment"])


@dataclass(frozen=True, slots=True)
class Expression:
    """
    A parsed tag expression.

    Attributes:
        type: tree-sitter node type ("identifier", "call_expression", ...).
              Tagged templates are "tagged_template_expression" and optional
              calls (`fn?.(x)`) are "optional_call_expression".
        text: Source text of the expression (parentheses stripped)
        loc: Location in the component source
        start: Start character offset in the component source
        end: End character offset in the component source
        name: Identifier name (identifiers only)
        callee: Called expression (direct calls only)
    """

    type: str
    text: str
    loc: SourceLocation
    start: int
    end: int
    name: str | None = None
    callee: "Expression | None" = None

    @property
    def is_call(self) -> bool:
        return self.type == "call_expression"


def _char_offset(data: bytes, byte_offset: int) -> int:
    """Convert a UTF-8 byte offset into a character offset."""
    return len(data[:byte_offset].decode("utf-8", errors="ignore"))


def _significant_children(node: "TSNode") -> list["TSNode"]:
    return [child for child in node.named_children if child.type not in _TRIVIA]


def first_error_node(root: "TSNode") -> "TSNode | None":
    """
    Find the first ERROR or missing node in document order.

    Returns:
        The node, or None if the tree is clean
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed(node.children))
    return None


class ExpressionParser:
    """
    Parses tag expressions and <script> bodies of one component.

    An expression is parsed as `(<text>\\n)`: wrapping forces expression
    context (so `{a: 1}` is an object, not a block) and the newline ends
    any trailing line comment.
    """

    def __init__(
        self,
        source: SourceFile,
        language: str = "javascript",
        registry: ParserRegistry | None = None,
    ):
        self._source = source
        self._language = language
        self._registry = registry or get_registry()

    @property
    def language(self) -> str:
        return self._language

    def parse(self, start: int, end: int) -> Expression:
        """
        Parse the expression occupying source[start:end].

        Raises:
            TemplateParseError: If the text is empty or not a single expression
        """
        text = self._source.content[start:end]
        if not text.strip():
            raise self._error("Expected an expression", "missing-expression", start)

        wrapped = f"({text}\n)".encode("utf-8")
        tree = self._registry.get_parser(self._language).parse(wrapped)
        root = tree.root_node

        node = self._top_expression(root, len(wrapped))
        if node is None:
            offset = start + len(text) - len(text.lstrip())
            raise self._error(f"Invalid expression: {text.strip()}", "invalid-expression", offset)

        return self._build(node, wrapped, start)

    def check_script(self, start: int, end: int, language: str) -> None:
        """
        Syntax-check a <script> body at source[start:end].

        Raises:
            TemplateParseError: If the script does not parse cleanly
        """
        data = self._source.content[start:end].encode("utf-8")
        root = self._registry.get_parser(language).parse(data).root_node
        if not root.has_error:
            return

        error_node = first_error_node(root)
        offset = start + (_char_offset(data, error_node.start_byte) if error_node is not None else 0)
        raise self._error("Invalid <script> content: unexpected syntax", "invalid-script", offset)

    def _top_expression(self, root: "TSNode", size: int) -> "TSNode | None":
        """Return the single expression inside the wrapping parentheses."""
        if root.has_error:
            return None

        statements = _significant_children(root)
        if len(statements) != 1 or statements[0].type != "expression_statement":
            return None

        inner = _significant_children(statements[0])
        if len(inner) != 1:
            return None

        # The wrapper itself must span the whole input: `a) + (b` is rejected
        node = inner[0]
        if node.type != "parenthesized_expression" or node.start_byte != 0 or node.end_byte != size:
            return None

        while node.type == "parenthesized_expression":
            children = _significant_children(node)
            if len(children) != 1:
                return None
            node = children[0]
        return node

    def _build(self, node: "TSNode", wrapped: bytes, base: int) -> Expression:
        # -1 for the wrapping "("
        start = base + _char_offset(wrapped, node.start_byte) - 1
        end = base + _char_offset(wrapped, node.end_byte) - 1

        node_type = node.type
        name = None
        callee = None

        if node_type == "identifier":
            name = self._source.content[start:end]
        elif node_type == "call_expression":
            arguments = node.child_by_field_name("arguments")
            function = node.child_by_field_name("function")
            if arguments is not None and arguments.type != "arguments":
                node_type = "tagged_template_expression"
            elif any(child.type == "optional_chain" for child in node.children):
                node_type = "optional_call_expression"
            elif function is not None:
                # `(sanitize)(x)` calls sanitize directly; `(0, sanitize)(x)` does not
                while function.type == "parenthesized_expression":
                    inner = _significant_children(function)
                    if len(inner) != 1:
                        break
                    function = inner[0]
                callee = self._build(function, wrapped, base)

        return Expression(
            type=node_type,
            text=self._source.content[start:end],
            loc=SourceLocation(self._source.position(start), self._source.position(end)),
            start=start,
            end=end,
            name=name,
            callee=callee,
        )

    def _error(self, message: str, code: str, offset: int) -> TemplateParseError:
        return TemplateParseError(
            message,
            code=code,
            position=self._source.position(offset),
            offset=offset,
            filename=self._source.file_path,
        )
