"""
Svelte Component Template Parser

Parses .svelte component source into an immutable template tree for
security analysis.

The markup tree comes from the tree-sitter `svelte` grammar and is mapped
onto template nodes:
- element / script_element / style_element → Element, InlineComponent
  (top-level <script>/<style> are lifted out of the markup)
- comment → Comment, with the rule names its directive suppresses
- html_expr → RawMustacheTag; other `{...}` tags → inert tags
- *_statement blocks → IfBlock / EachBlock / AwaitBlock / KeyBlock /
  SnippetBlock, one fragment per branch

The grammar keeps whitespace out of the tree, so text (whitespace-only text
included) is recovered from the source between mapped siblings. Block
headers such as `{#each items as item, i (item.id)}` are read from the
source, and tag expressions and scripts are syntax-checked with the
JavaScript (or TypeScript) grammar.

Dialects:
- legacy (Svelte 3/4, default)
- modern (Svelte 5): adds {#snippet} and {@render}, {#each} without `as`
"""

import html
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from svelte_unsafe_html.exceptions import TemplateParseError
from svelte_unsafe_html.observability import get_logger
from svelte_unsafe_html.parsing.expression import Expression, ExpressionParser, first_error_node
from svelte_unsafe_html.parsing.js_scanner import find_closing_brace, find_top_level
from svelte_unsafe_html.parsing.parser_registry import ParserRegistry, get_registry
from svelte_unsafe_html.parsing.source_file import SourceFile
from svelte_unsafe_html.template.ignores import extract_ignores
from svelte_unsafe_html.template.nodes import (
    Attribute,
    AwaitBlock,
    Comment,
    ConstTag,
    DebugTag,
    EachBlock,
    Element,
    Fragment,
    IfBlock,
    InlineComponent,
    KeyBlock,
    MustacheTag,
    NodeKind,
    RawMustacheTag,
    RenderTag,
    Script,
    SnippetBlock,
    Style,
    TemplateAst,
    TemplateNode,
    Text,
)

if TYPE_CHECKING:
    from tree_sitter import Node as TSNode

logger = get_logger(__name__)

# ============================================================
# Constants
# ============================================================

COMPONENT_TAGS = frozenset(["svelte:self", "svelte:component"])

# Elements whose content is raw text, never markup
RAW_TEXT_ELEMENTS = frozenset(["script", "style"])

_ELEMENT_TYPES = frozenset(["element", "script_element", "style_element"])
_OPEN_TAG_TYPES = frozenset(["start_tag", "self_closing_tag"])
_SKIPPED_TYPES = frozenset(["start_tag", "end_tag", "self_closing_tag", "doctype"])
_BLOCK_SIGILS = frozenset("#:/")

_WHITESPACE = re.compile(r"\s*")
_WORD = re.compile(r"[a-z]*")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_TS_LANG = re.compile(r"\blang\s*=\s*[\"']?(?:ts|typescript)\b", re.IGNORECASE)
_CLOSING_TAG_NAME = re.compile(r"</\s*([^\s>]*)")

_EACH_AS = re.compile(r"\s+as\s+")
_AWAIT_SHORTHAND = re.compile(r"\s+(then|catch)(?=\s|$)")
_ELSE_IF = re.compile(r"\s+if(?=\s|$)")
_OPEN_PAREN = re.compile(r"\(")
_COMMA = re.compile(r",")
_SNIPPET_SIGNATURE = re.compile(r"^([A-Za-z_$][\w$]*)\s*(?:<[^>]*>)?\s*\(([\s\S]*)\)$")

# Tags handed to the markup grammar in legacy form (see _legacy_markup)
_LEGACY_REWRITES = re.compile(
    r"(?P<skip><!--[\s\S]*?-->|<(?P<raw>script|style)\b[\s\S]*?</(?P=raw)\s*>)"
    r"|\{\s*(?P<sigil>[#/@])\s*(?P<keyword>snippet|each|render|const|debug)\b"
)


class _Role(Enum):
    """How a markup tree node is mapped."""

    SKIP = "skip"
    DESCEND = "descend"
    ELEMENT = "element"
    COMMENT = "comment"
    TAG = "tag"
    BLOCK = "block"
    STRAY_CLOSING_TAG = "stray_closing_tag"


# ============================================================
# Conversion state (mutable frames, frozen into nodes when done)
# ============================================================


@dataclass(frozen=True)
class _Header:
    """A block tag: `{#if a}`, `{:else}`, `{/if}`..."""

    start: int
    close: int
    sigil: str
    keyword: str
    rest: int

    @property
    def end(self) -> int:
        return self.close + 1


@dataclass
class _Branch:
    """One fragment of an element or block under construction."""

    label: str
    start: int
    tag_start: int
    end: int = 0
    test: Expression | None = None
    # (start, end, node); node is None for ranges lifted out of the markup
    items: list[tuple[int, int, TemplateNode | None]] = field(default_factory=list)

    def freeze(self, content: str) -> Fragment:
        children: list[TemplateNode] = []
        cursor = self.start
        for start, end, node in self.items:
            if start > cursor:
                children.append(_text(content, cursor, start))
            if node is not None:
                children.append(node)
            cursor = max(cursor, end)
        if cursor < self.end:
            children.append(_text(content, cursor, self.end))
        return Fragment(start=self.start, end=self.end, children=tuple(children))


@dataclass
class _Frame:
    """An element or block whose children are still being converted."""

    kind: NodeKind
    start: int
    end: int
    # Mappable children in reverse document order; pop() yields the next one
    pending: list[tuple[_Role, "TSNode"]] = field(default_factory=list)
    name: str = ""
    attributes: tuple[Attribute, ...] = ()
    expression: Expression | None = None
    context: str | None = None
    index: str | None = None
    key: Expression | None = None
    value: str | None = None
    error: str | None = None
    parameters: str = ""
    branches: list[_Branch] = field(default_factory=list)

    def add(self, start: int, end: int, node: TemplateNode | None) -> None:
        for branch in reversed(self.branches):
            if start >= branch.start:
                branch.items.append((start, end, node))
                return
        self.branches[0].items.append((start, end, node))

    def labels(self) -> list[str]:
        return [branch.label for branch in self.branches]


class _TreeConverter:
    """Single-use conversion of one markup tree (explicit frame stack, no recursion)."""

    def __init__(self, source: SourceFile, registry: ParserRegistry, modern: bool):
        self.source = source
        self.content = source.content
        self.registry = registry
        self.modern = modern
        self.language = "javascript"
        self.expressions = ExpressionParser(source, self.language, registry)
        self.instance: Script | None = None
        self.module: Script | None = None
        self.css: Style | None = None

    # ------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------

    def run(self, root: "TSNode") -> TemplateAst:
        if root.has_error:
            raise self._syntax_error(root)

        self.language = self._script_language(root)
        self.expressions = ExpressionParser(self.source, self.language, self.registry)

        size = len(self.content)
        document = _Frame(kind=NodeKind.FRAGMENT, start=0, end=size, pending=self._children(root, 0, size))
        document.branches.append(_Branch(label="root", start=0, tag_start=0, end=size))
        self._check_stray_headers(0, size, document.pending)

        stack = [document]
        while stack:
            frame = stack[-1]
            if frame.pending:
                role, node = frame.pending.pop()
                opened = self._visit(role, node, frame, top_level=frame is document)
                if opened is not None:
                    stack.append(opened)
                continue

            stack.pop()
            if stack:
                stack[-1].add(frame.start, frame.end, _build(frame, self.content))

        return TemplateAst(
            fragment=document.branches[0].freeze(self.content),
            source=self.source,
            instance=self.instance,
            module=self.module,
            css=self.css,
            modern=self.modern,
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _error(self, message: str, code: str, offset: int) -> TemplateParseError:
        return TemplateParseError(
            message,
            code=code,
            position=self.source.position(offset),
            offset=offset,
            filename=self.source.file_path,
        )

    def _syntax_error(self, root: "TSNode") -> TemplateParseError:
        node = first_error_node(root)
        offset = self.source.char_offset(node.start_byte) if node is not None else 0

        if node is not None and node.is_missing:
            message = f"Expected {node.type.replace('_', ' ')}"
        elif offset >= len(self.content):
            message = "Unexpected end of input"
        else:
            snippet = self.content[offset : offset + 20].split("\n", 1)[0]
            message = f"Unexpected {snippet!r}"
        return self._error(message, "invalid-syntax", offset)

    def _span(self, node: "TSNode") -> tuple[int, int]:
        return self.source.char_offset(node.start_byte), self.source.char_offset(node.end_byte)

    def _closing_brace(self, open_index: int) -> int:
        close = find_closing_brace(self.content, open_index + 1)
        if close is None:
            raise self._error("Unexpected end of input: expected '}'", "unclosed-tag", open_index)
        return close

    def _script_language(self, root: "TSNode") -> str:
        for child in root.children:
            if child.type != "script_element":
                continue
            open_tag = _open_tag(child)
            if open_tag is not None:
                start, end = self._span(open_tag)
                if _TS_LANG.search(self.content, start, end):
                    return "typescript"
        return "javascript"

    # ------------------------------------------------------------
    # Tree walking
    # ------------------------------------------------------------

    def _role(self, node: "TSNode") -> _Role:
        node_type = node.type
        if node_type == "comment":
            return _Role.COMMENT
        if node_type in _ELEMENT_TYPES:
            return _Role.ELEMENT
        if node_type == "erroneous_end_tag":
            return _Role.STRAY_CLOSING_TAG
        if not node.is_named or node_type in _SKIPPED_TYPES or node_type.startswith("raw_text"):
            return _Role.SKIP

        start, end = self._span(node)
        if not self.content.startswith("{", start):
            return _Role.DESCEND if node.child_count else _Role.SKIP

        # A `{...}` node is a single tag, a whole block, or a branch wrapper
        close = find_closing_brace(self.content, start + 1)
        if close is None or end < close + 1:
            return _Role.SKIP
        sigil = self.content[start + 1 : close].lstrip()[:1]
        if end == close + 1:
            return _Role.SKIP if sigil in _BLOCK_SIGILS else _Role.TAG
        return _Role.BLOCK if sigil == "#" else _Role.DESCEND

    def _children(self, node: "TSNode", lo: int, hi: int) -> list[tuple[_Role, "TSNode"]]:
        """Mappable descendants of node inside [lo, hi), in reverse document order."""
        found: list[tuple[_Role, "TSNode"]] = []
        todo = list(reversed(node.children))
        while todo:
            child = todo.pop()
            role = self._role(child)
            if role is _Role.SKIP:
                continue
            if role is _Role.DESCEND:
                todo.extend(reversed(child.children))
                continue
            start, end = self._span(child)
            if lo <= start and end <= hi:
                found.append((role, child))
        found.reverse()
        return found

    def _headers(self, lo: int, hi: int, pending: list[tuple[_Role, "TSNode"]]) -> list[_Header]:
        """
        Block tags between the mapped children in [lo, hi).

        Text never contains `{`, so every brace outside a mapped child opens
        a block tag.
        """
        headers: list[_Header] = []
        cursor = lo
        spans = [self._span(node) for _, node in reversed(pending)] + [(hi, hi)]
        for start, end in spans:
            index = self.content.find("{", cursor, start)
            while index != -1:
                header = self._header(index)
                headers.append(header)
                index = self.content.find("{", header.end, start)
            cursor = max(cursor, end)
        return headers

    def _header(self, start: int) -> _Header:
        close = self._closing_brace(start)
        lead = _WHITESPACE.match(self.content, start + 1).end()
        sigil = self.content[lead] if lead < close else ""
        word = _WORD.match(self.content, lead + 1)
        return _Header(start=start, close=close, sigil=sigil, keyword=word.group(), rest=word.end())

    def _check_stray_headers(self, lo: int, hi: int, pending: list[tuple[_Role, "TSNode"]]) -> None:
        """Block tags are only valid inside their own block."""
        for header in self._headers(lo, hi, pending):
            if header.sigil == ":":
                raise self._error(
                    f"Cannot use {{:{header.keyword}}} outside a block",
                    f"invalid-{header.keyword or 'block'}-placement",
                    header.start,
                )
            if header.sigil == "/":
                raise self._error(
                    f"Unexpected block closing tag {{/{header.keyword}}}", "unexpected-block-close", header.start
                )
            raise self._error(f"Unexpected block tag {{#{header.keyword}}}", "expected-block-type", header.start)

    def _visit(self, role: _Role, node: "TSNode", frame: _Frame, top_level: bool) -> _Frame | None:
        start, end = self._span(node)

        if role is _Role.COMMENT:
            text = self.content[start:end]
            data = text[4:-3] if text.endswith("-->") else text[4:]
            frame.add(start, end, Comment(start=start, end=end, data=data, ignores=extract_ignores(data)))
            return None

        if role is _Role.STRAY_CLOSING_TAG:
            match = _CLOSING_TAG_NAME.match(self.content, start)
            name = match.group(1) if match else ""
            raise self._error(f"</{name}> attempted to close an element that was not open", "invalid-closing-tag", start)

        if role is _Role.TAG:
            frame.add(start, end, self._tag(start, end))
            return None

        if role is _Role.ELEMENT:
            return self._element(node, frame, top_level)

        return self._block(node, start, end)

    # ------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------

    def _element(self, node: "TSNode", frame: _Frame, top_level: bool) -> _Frame | None:
        start, end = self._span(node)
        open_tag = _open_tag(node)
        if open_tag is None:
            raise self._error("Expected a valid element or component name", "invalid-tag-name", start)

        name_node = next((child for child in open_tag.children if child.type == "tag_name"), None)
        name = self.content[slice(*self._span(name_node))] if name_node is not None else ""
        if not name:
            raise self._error("Expected a valid element or component name", "invalid-tag-name", start)

        attributes = self._attributes(open_tag)
        content_start = self._span(open_tag)[1]
        close_tag = next((child for child in node.children if child.type == "end_tag"), None)
        content_end = self._span(close_tag)[0] if close_tag is not None else end
        if open_tag.type == "self_closing_tag":
            content_start = content_end = end

        lowered = name.lower()
        cls = InlineComponent if _is_component(name) else Element

        if node.type != "element" or lowered in RAW_TEXT_ELEMENTS:
            if top_level and lowered in RAW_TEXT_ELEMENTS:
                self._lift(lowered, attributes, start, end, content_start, content_end)
                frame.add(start, end, None)
                return None
            raw = self.content[content_start:content_end]
            text = Text(start=content_start, end=content_end, raw=raw, data=raw)
            fragment = Fragment(start=content_start, end=content_end, children=(text,) if raw else ())
            frame.add(start, end, cls(start=start, end=end, name=name, attributes=attributes, fragment=fragment))
            return None

        pending = self._children(node, content_start, content_end)
        self._check_stray_headers(content_start, content_end, pending)
        child = _Frame(kind=cls.kind, start=start, end=end, pending=pending, name=name, attributes=attributes)
        child.branches.append(_Branch(label="fragment", start=content_start, tag_start=start, end=content_end))
        return child

    def _lift(
        self,
        name: str,
        attributes: tuple[Attribute, ...],
        start: int,
        end: int,
        content_start: int,
        content_end: int,
    ) -> None:
        content = self.content[content_start:content_end]
        values = {attr.name: _unquote(attr.value) for attr in attributes}

        if name == "style":
            if self.css is not None:
                raise self._error("You can only have one top-level <style> tag per component", "style-duplicate", start)
            self.css = Style(content=content, attributes=attributes, start=start, end=end)
            return

        context = "module" if values.get("context") == "module" or "module" in values else "default"
        lang = values.get("lang") or "js"
        if context == "module" and self.module is not None:
            raise self._error(
                'A component can only have one <script context="module"> element', "script-duplicate", start
            )
        if context == "default" and self.instance is not None:
            raise self._error("A component can only have one instance-level <script> element", "script-duplicate", start)

        language = "typescript" if lang in ("ts", "typescript") else "javascript"
        self.expressions.check_script(content_start, content_end, language)

        script = Script(context=context, lang=lang, content=content, attributes=attributes, start=start, end=end)
        if context == "module":
            self.module = script
        else:
            self.instance = script

    def _attributes(self, open_tag: "TSNode") -> tuple[Attribute, ...]:
        attributes: list[Attribute] = []
        for child in open_tag.named_children:
            if child.type in ("tag_name", "comment"):
                continue
            start, end = self._span(child)
            name_node = next((sub for sub in child.children if sub.type == "attribute_name"), None)

            if name_node is None:
                # Shorthand `{name}` / spread `{...props}`
                name = self.content[start:end]
                value = None
            else:
                name_start, name_end = self._span(name_node)
                name = self.content[name_start:name_end]
                rest = self.content[name_end:end].lstrip()
                value = rest[1:].lstrip() if rest.startswith("=") else None

            self._check_attribute(name, value, start, end)
            attributes.append(Attribute(name=name, value=value, start=start, end=end))
        return tuple(attributes)

    def _check_attribute(self, name: str, value: str | None, start: int, end: int) -> None:
        """Validate the expressions an attribute carries."""
        if name.startswith("{"):
            close = self._closing_brace(start)
            body = self.content[start + 1 : close].strip()
            if body.startswith("..."):
                self.expressions.parse(self.content.index("...", start) + 3, close)
            elif not _IDENTIFIER.match(body):
                raise self._error("Expected attribute shorthand `{name}` or spread `{...props}`", "invalid-attribute", start)
            return

        if value is None:
            return
        index = self.content.find("{", end - len(value), end)
        while index != -1:
            close = self._closing_brace(index)
            self.expressions.parse(index + 1, close)
            index = self.content.find("{", close + 1, end)

    # ------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------

    def _tag(self, start: int, end: int) -> TemplateNode:
        close = end - 1
        lead = _WHITESPACE.match(self.content, start + 1).end()
        if lead < close and self.content[lead] == "@":
            word = _WORD.match(self.content, lead + 1)
            return self._special_tag(word.group(), word.end(), close, start, end)

        return MustacheTag(start=start, end=end, expression=self.expressions.parse(start + 1, close))

    def _special_tag(self, keyword: str, rest: int, close: int, start: int, end: int) -> TemplateNode:
        if keyword == "html":
            return RawMustacheTag(start=start, end=end, expression=self.expressions.parse(rest, close))

        if keyword == "const":
            expression = self.expressions.parse(rest, close)
            if expression.type != "assignment_expression":
                raise self._error("{@const ...} must be an assignment", "invalid-const", start)
            return ConstTag(start=start, end=end, expression=expression)

        if keyword == "debug":
            names = [name.strip() for name in self.content[rest:close].split(",")]
            names = [name for name in names if name]
            if any(not _IDENTIFIER.match(name) for name in names):
                raise self._error("{@debug ...} arguments must be identifiers", "invalid-debug-args", start)
            return DebugTag(start=start, end=end, identifiers=tuple(names))

        if keyword == "render" and self.modern:
            expression = self.expressions.parse(rest, close)
            if expression.type not in ("call_expression", "optional_call_expression"):
                raise self._error("{@render ...} tags can only contain call expressions", "invalid-render-expression", start)
            return RenderTag(start=start, end=end, expression=expression)

        expected = "'html', 'const', 'debug' or 'render'" if self.modern else "'html', 'const' or 'debug'"
        raise self._error(f"Expected {expected}", "unknown-tag", start)

    # ------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------

    def _block(self, node: "TSNode", start: int, end: int) -> _Frame:
        pending = self._children(node, start, end)
        headers = self._headers(start, end, pending)

        opening, closing = headers[0], headers[-1]
        if opening.sigil != "#" or opening.start != start:
            raise self._error("Expected a block opening tag", "expected-block-type", start)

        frame = self._open_block(opening)
        frame.end = end
        frame.pending = pending

        for header in headers[1:-1]:
            if header.sigil == ":":
                self._continue_block(frame, header)
            elif header.sigil == "/":
                raise self._error(f"Expected {{/{frame.name}}}", "expected-block-close", header.start)
            else:
                raise self._error(f"Unexpected block tag {{#{header.keyword}}}", "expected-block-type", header.start)

        if len(headers) < 2 or closing.sigil != "/":
            raise self._error(f"{{#{frame.name}}} block was left open", "unclosed-block", start)
        if closing.keyword != frame.name or self.content[closing.rest : closing.close].strip():
            raise self._error(f"Expected {{/{frame.name}}}", "expected-block-close", closing.start)
        frame.branches[-1].end = closing.start
        return frame

    def _open_block(self, header: _Header) -> _Frame:
        keyword, rest, close, start = header.keyword, header.rest, header.close, header.start
        body = self.content[rest:close]

        if keyword == "if":
            frame = _Frame(kind=NodeKind.IF_BLOCK, start=start, end=start, name="if")
            test = self.expressions.parse(rest, close)
            frame.branches.append(_Branch(label="consequent", start=header.end, tag_start=start, test=test))

        elif keyword == "each":
            frame = _Frame(kind=NodeKind.EACH_BLOCK, start=start, end=start, name="each")
            self._each_header(frame, body, rest, start)
            frame.branches.append(_Branch(label="body", start=header.end, tag_start=start))

        elif keyword == "await":
            frame = _Frame(kind=NodeKind.AWAIT_BLOCK, start=start, end=start, name="await")
            shorthand = find_top_level(body, _AWAIT_SHORTHAND)
            if shorthand is None:
                frame.expression = self.expressions.parse(rest, close)
                label = "pending"
            else:
                frame.expression = self.expressions.parse(rest, rest + shorthand.start())
                binding = body[shorthand.end() :].strip() or None
                label = shorthand.group(1)
                if label == "then":
                    frame.value = binding
                else:
                    frame.error = binding
            frame.branches.append(_Branch(label=label, start=header.end, tag_start=start))

        elif keyword == "key":
            frame = _Frame(kind=NodeKind.KEY_BLOCK, start=start, end=start, name="key")
            frame.expression = self.expressions.parse(rest, close)
            frame.branches.append(_Branch(label="fragment", start=header.end, tag_start=start))

        elif keyword == "snippet" and self.modern:
            signature = _SNIPPET_SIGNATURE.match(body.strip())
            if signature is None:
                raise self._error("Expected a snippet name and parameter list", "invalid-snippet", start)
            frame = _Frame(
                kind=NodeKind.SNIPPET_BLOCK,
                start=start,
                end=start,
                name="snippet",
                context=signature.group(1),
                parameters=signature.group(2).strip(),
            )
            frame.branches.append(_Branch(label="body", start=header.end, tag_start=start))

        else:
            expected = "if, each, await, key or snippet" if self.modern else "if, each, await or key"
            raise self._error(f"Expected {expected}", "expected-block-type", start)

        return frame

    def _each_header(self, frame: _Frame, body: str, rest: int, start: int) -> None:
        match = find_top_level(body, _EACH_AS)
        if match is None:
            if not self.modern:
                raise self._error("Expected 'as' in {#each} block", "expected-as", start)
            frame.expression = self.expressions.parse(rest, rest + len(body))
            return

        frame.expression = self.expressions.parse(rest, rest + match.start())
        context = body[match.end() :]
        context_offset = rest + match.end()

        key_open = find_top_level(context, _OPEN_PAREN)
        if key_open is not None:
            key_close = context.rstrip()
            if not key_close.endswith(")"):
                raise self._error("Expected ')' after {#each} key", "invalid-each-key", start)
            key_start = context_offset + key_open.end()
            key_end = context_offset + len(key_close) - 1
            frame.key = self.expressions.parse(key_start, key_end)
            context = context[: key_open.start()]

        comma = find_top_level(context, _COMMA)
        if comma is not None:
            index = context[comma.end() :].strip()
            if not _IDENTIFIER.match(index):
                raise self._error("Expected an identifier for the {#each} index", "invalid-each-index", start)
            frame.index = index
            context = context[: comma.start()]

        frame.context = context.strip()
        if not frame.context:
            raise self._error("Expected a context pattern after 'as'", "expected-each-context", start)

    def _continue_block(self, frame: _Frame, header: _Header) -> None:
        keyword, rest, close, start = header.keyword, header.rest, header.close, header.start
        body = self.content[rest:close]
        labels = frame.labels()

        if keyword == "else":
            else_if = _ELSE_IF.match(body)
            if frame.kind is NodeKind.IF_BLOCK:
                if "alternate" in labels:
                    raise self._error("Cannot have an {:else} branch after {:else}", "duplicate-else", start)
                if else_if:
                    test = self.expressions.parse(rest + else_if.end(), close)
                    _next_branch(frame, "elseif", header, test=test)
                elif body.strip():
                    raise self._error("Expected '}' or 'if' after {:else", "invalid-else", start)
                else:
                    _next_branch(frame, "alternate", header)
                return
            if frame.kind is NodeKind.EACH_BLOCK:
                if else_if:
                    raise self._error("{:else if} is not allowed in {#each}", "invalid-elseif", start)
                if "fallback" in labels or body.strip():
                    raise self._error("Invalid {:else} in {#each}", "invalid-else", start)
                _next_branch(frame, "fallback", header)
                return
            raise self._error("Cannot use {:else} outside an {#if} or {#each} block", "invalid-else-placement", start)

        if keyword in ("then", "catch"):
            if frame.kind is not NodeKind.AWAIT_BLOCK:
                raise self._error(
                    f"Cannot use {{:{keyword}}} outside an {{#await}} block", f"invalid-{keyword}-placement", start
                )
            if keyword in labels or (keyword == "then" and "catch" in labels):
                raise self._error(f"Unexpected {{:{keyword}}} in {{#await}} block", f"invalid-{keyword}-placement", start)
            binding = body.strip() or None
            if keyword == "then":
                frame.value = binding
            else:
                frame.error = binding
            _next_branch(frame, keyword, header)
            return

        raise self._error("Expected :else, :then or :catch", "expected-block-continuation", start)


# ============================================================
# Node construction
# ============================================================


def _next_branch(frame: _Frame, label: str, header: _Header, test: Expression | None = None) -> None:
    frame.branches[-1].end = header.start
    frame.branches.append(_Branch(label=label, start=header.end, tag_start=header.start, test=test))


def _build(frame: _Frame, content: str) -> TemplateNode:
    """Freeze a finished frame into its node."""
    if frame.kind in (NodeKind.ELEMENT, NodeKind.COMPONENT):
        cls = InlineComponent if frame.kind is NodeKind.COMPONENT else Element
        return cls(
            start=frame.start,
            end=frame.end,
            name=frame.name,
            attributes=frame.attributes,
            fragment=frame.branches[0].freeze(content),
        )
    if frame.kind is NodeKind.IF_BLOCK:
        return _build_if(frame, content)

    # Branch labels are unique outside {#if}
    fragments = {branch.label: branch.freeze(content) for branch in frame.branches}
    if frame.kind is NodeKind.EACH_BLOCK:
        return EachBlock(
            start=frame.start,
            end=frame.end,
            expression=frame.expression,
            context=frame.context,
            index=frame.index,
            key=frame.key,
            body=fragments.get("body"),
            fallback=fragments.get("fallback"),
        )
    if frame.kind is NodeKind.AWAIT_BLOCK:
        return AwaitBlock(
            start=frame.start,
            end=frame.end,
            expression=frame.expression,
            value=frame.value,
            error=frame.error,
            pending=fragments.get("pending"),
            then=fragments.get("then"),
            catch=fragments.get("catch"),
        )
    if frame.kind is NodeKind.KEY_BLOCK:
        return KeyBlock(start=frame.start, end=frame.end, expression=frame.expression, fragment=fragments["fragment"])
    return SnippetBlock(
        start=frame.start,
        end=frame.end,
        name=frame.context or "",
        parameters=frame.parameters,
        body=fragments["body"],
    )


def _build_if(frame: _Frame, content: str) -> IfBlock:
    """Fold {:else if} branches into nested IfBlocks, innermost first."""
    end = frame.end
    alternate: Fragment | None = None
    for branch in reversed(frame.branches[1:]):
        if branch.label == "alternate":
            alternate = branch.freeze(content)
            continue
        nested = IfBlock(
            start=branch.tag_start,
            end=end,
            test=branch.test,
            consequent=branch.freeze(content),
            alternate=alternate,
            elseif=True,
        )
        alternate = Fragment(start=branch.tag_start, end=end, children=(nested,))

    first = frame.branches[0]
    return IfBlock(start=frame.start, end=end, test=first.test, consequent=first.freeze(content), alternate=alternate)


def _text(content: str, start: int, end: int) -> Text:
    raw = content[start:end]
    return Text(start=start, end=end, raw=raw, data=html.unescape(raw))


def _open_tag(node: "TSNode") -> "TSNode | None":
    return next((child for child in node.children if child.type in _OPEN_TAG_TYPES), None)


def _is_component(name: str) -> bool:
    return name[0].isupper() or "." in name or name in COMPONENT_TAGS


def _unquote(value: str | None) -> str:
    if value is None:
        return ""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _legacy_markup(content: str) -> str:
    """
    Rewrite tags the markup grammar may not know into legacy equivalents.

    `{@render ...}`, `{@const ...}` and `{@debug ...}` become plain `{...}`
    tags; `{#snippet}` and `{#each}` without `as` become `{#if}` blocks.
    Every replacement has the same length, so offsets in the grammar's
    tree still point into the original source, which is what the
    conversion reads.
    """
    chars = list(content)
    each_rewritten: list[bool] = []

    for match in _LEGACY_REWRITES.finditer(content):
        if match.group("skip"):
            continue
        sigil, keyword = match.group("sigil"), match.group("keyword")
        keyword_start, keyword_end = match.span("keyword")

        if sigil == "@":
            if keyword in ("render", "const", "debug"):
                _overwrite(chars, match.start("sigil"), keyword_end, "")
            continue

        if keyword == "snippet":
            _overwrite(chars, keyword_start, keyword_end, "if")
        elif sigil == "#":
            close = find_closing_brace(content, keyword_end)
            body = content[keyword_end:close] if close is not None else ""
            rewrite = find_top_level(body, _EACH_AS) is None
            each_rewritten.append(rewrite)
            if rewrite:
                _overwrite(chars, keyword_start, keyword_end, "if")
        elif each_rewritten and each_rewritten.pop():
            _overwrite(chars, keyword_start, keyword_end, "if")

    return "".join(chars)


def _overwrite(chars: list[str], start: int, end: int, word: str) -> None:
    chars[start:end] = word.ljust(end - start)


# ============================================================
# SvelteTemplateParser
# ============================================================


class SvelteTemplateParser:
    """
    Svelte component parser.

    Stateless: every parse() call builds its own converter, so one instance
    can be shared between threads.
    """

    def __init__(self, registry: ParserRegistry | None = None):
        self._registry = registry

    @property
    def supported_extensions(self) -> list[str]:
        """Supported file extensions"""
        return [".svelte"]

    @property
    def engine_name(self) -> str:
        """Engine identifier"""
        return "svelte"

    def parse(self, source_code: str, file_path: str, modern: bool = False) -> TemplateAst:
        """
        Parse Svelte component source code.

        Args:
            source_code: Component source
            file_path: Source file path (used in errors)
            modern: Use the Svelte 5 template dialect

        Returns:
            TemplateAst with the markup fragment and lifted script/style

        Raises:
            TemplateParseError: If the component is malformed
        """
        registry = self._registry or get_registry()
        source = SourceFile(file_path=file_path, content=source_code)

        tree = registry.get_parser("svelte").parse(_legacy_markup(source_code).encode("utf-8"))
        converter = _TreeConverter(source, registry, modern)
        ast = converter.run(tree.root_node)

        logger.debug(
            "template_parsed",
            filename=file_path,
            lines=source.line_count,
            language=converter.language,
            modern=modern,
            root_nodes=len(ast.fragment.children),
        )
        return ast


def create_svelte_parser() -> SvelteTemplateParser:
    """
    Factory function for SvelteTemplateParser.

    Returns:
        SvelteTemplateParser instance
    """
    return SvelteTemplateParser()
