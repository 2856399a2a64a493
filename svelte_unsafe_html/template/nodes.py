"""
Template tree nodes.

Immutable node classes produced by SvelteTemplateParser. Every node carries
a `kind` discriminator; consumers dispatch on it rather than on field shape.

Fragment is the only node holding `children` directly. Elements and blocks
own one or more fragments, returned in source order by `fragments()`; each
fragment is a separate sibling scope.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar

from svelte_unsafe_html.parsing.expression import Expression
from svelte_unsafe_html.parsing.source_file import SourceFile


class NodeKind(str, Enum):
    """Node discriminator (values follow the Svelte AST type names)."""

    FRAGMENT = "Fragment"
    ELEMENT = "Element"
    COMPONENT = "InlineComponent"
    IF_BLOCK = "IfBlock"
    EACH_BLOCK = "EachBlock"
    AWAIT_BLOCK = "AwaitBlock"
    KEY_BLOCK = "KeyBlock"
    SNIPPET_BLOCK = "SnippetBlock"
    RAW_HTML = "RawMustacheTag"
    MUSTACHE = "MustacheTag"
    CONST_TAG = "ConstTag"
    DEBUG_TAG = "DebugTag"
    RENDER_TAG = "RenderTag"
    COMMENT = "Comment"
    TEXT = "Text"


CONTAINER_KINDS = frozenset(
    [
        NodeKind.FRAGMENT,
        NodeKind.ELEMENT,
        NodeKind.COMPONENT,
        NodeKind.IF_BLOCK,
        NodeKind.EACH_BLOCK,
        NodeKind.AWAIT_BLOCK,
        NodeKind.KEY_BLOCK,
        NodeKind.SNIPPET_BLOCK,
    ]
)


@dataclass(frozen=True, slots=True)
class TemplateNode:
    """Base class for template nodes (start/end are character offsets)."""

    kind: ClassVar[NodeKind]

    start: int
    end: int

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    def fragments(self) -> tuple["Fragment", ...]:
        """Owned fragments in source order (empty for leaf nodes)."""
        return ()


@dataclass(frozen=True, slots=True)
class Fragment(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.FRAGMENT

    children: tuple[TemplateNode, ...] = ()

    def fragments(self) -> tuple["Fragment", ...]:
        return (self,)


@dataclass(frozen=True, slots=True)
class Attribute:
    """
    Element attribute.

    `value` is the raw source text after `=` (quotes included) or None for
    boolean attributes. Shorthand `{name}` and spread `{...props}` keep the
    braces in `name`.
    """

    name: str
    value: str | None
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Element(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.ELEMENT

    name: str = ""
    attributes: tuple[Attribute, ...] = ()
    fragment: Fragment | None = None

    def fragments(self) -> tuple[Fragment, ...]:
        return (self.fragment,) if self.fragment is not None else ()


@dataclass(frozen=True, slots=True)
class InlineComponent(Element):
    kind: ClassVar[NodeKind] = NodeKind.COMPONENT


@dataclass(frozen=True, slots=True)
class IfBlock(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.IF_BLOCK

    test: Expression | None = None
    consequent: Fragment | None = None
    alternate: Fragment | None = None
    elseif: bool = False

    def fragments(self) -> tuple[Fragment, ...]:
        return tuple(f for f in (self.consequent, self.alternate) if f is not None)


@dataclass(frozen=True, slots=True)
class EachBlock(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.EACH_BLOCK

    expression: Expression | None = None
    context: str | None = None
    index: str | None = None
    key: Expression | None = None
    body: Fragment | None = None
    fallback: Fragment | None = None

    def fragments(self) -> tuple[Fragment, ...]:
        return tuple(f for f in (self.body, self.fallback) if f is not None)


@dataclass(frozen=True, slots=True)
class AwaitBlock(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.AWAIT_BLOCK

    expression: Expression | None = None
    value: str | None = None
    error: str | None = None
    pending: Fragment | None = None
    then: Fragment | None = None
    catch: Fragment | None = None

    def fragments(self) -> tuple[Fragment, ...]:
        return tuple(f for f in (self.pending, self.then, self.catch) if f is not None)


@dataclass(frozen=True, slots=True)
class KeyBlock(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.KEY_BLOCK

    expression: Expression | None = None
    fragment: Fragment | None = None

    def fragments(self) -> tuple[Fragment, ...]:
        return (self.fragment,) if self.fragment is not None else ()


@dataclass(frozen=True, slots=True)
class SnippetBlock(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.SNIPPET_BLOCK

    name: str = ""
    parameters: str = ""
    body: Fragment | None = None

    def fragments(self) -> tuple[Fragment, ...]:
        return (self.body,) if self.body is not None else ()


@dataclass(frozen=True, slots=True)
class RawMustacheTag(TemplateNode):
    """`{@html expression}`: inserts the value as markup, unescaped."""

    kind: ClassVar[NodeKind] = NodeKind.RAW_HTML

    expression: Expression | None = None


@dataclass(frozen=True, slots=True)
class MustacheTag(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.MUSTACHE

    expression: Expression | None = None


@dataclass(frozen=True, slots=True)
class ConstTag(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.CONST_TAG

    expression: Expression | None = None


@dataclass(frozen=True, slots=True)
class DebugTag(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.DEBUG_TAG

    identifiers: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RenderTag(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.RENDER_TAG

    expression: Expression | None = None


@dataclass(frozen=True, slots=True)
class Comment(TemplateNode):
    """HTML comment; `ignores` holds the rule names its directive suppresses."""

    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    data: str = ""
    ignores: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Text(TemplateNode):
    kind: ClassVar[NodeKind] = NodeKind.TEXT

    raw: str = ""
    data: str = ""

    @property
    def is_whitespace(self) -> bool:
        return self.data.strip() == ""


@dataclass(frozen=True, slots=True)
class Script:
    """Top-level <script> block (context is "default" or "module")."""

    context: str
    lang: str
    content: str
    attributes: tuple[Attribute, ...]
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Style:
    """Top-level <style> block."""

    content: str
    attributes: tuple[Attribute, ...]
    start: int
    end: int


@dataclass(frozen=True)
class TemplateAst:
    """Parsed component: markup fragment plus lifted script/style blocks."""

    fragment: Fragment
    source: SourceFile
    instance: Script | None = None
    module: Script | None = None
    css: Style | None = None
    modern: bool = False


def to_dict(value: Any) -> Any:
    """
    Convert nodes (and anything they hold) to JSON-ready structures.

    Template nodes gain a "type" key with their kind name.
    """
    if isinstance(value, TemplateNode):
        result: dict[str, Any] = {"type": value.kind.value}
        for f in fields(value):
            result[f.name] = to_dict(getattr(value, f.name))
        return result
    if isinstance(value, SourceFile):
        return value.file_path
    if isinstance(value, Expression):
        return {
            "type": value.type,
            "text": value.text,
            "start": value.start,
            "end": value.end,
            "loc": {"start": value.loc.start.to_dict(), "end": value.loc.end.to_dict()},
            "name": value.name,
            "callee": to_dict(value.callee),
        }
    if isinstance(value, frozenset):
        return sorted(value)
    if isinstance(value, (tuple, list)):
        return [to_dict(item) for item in value]
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: to_dict(getattr(value, f.name)) for f in fields(value)}
    return value
