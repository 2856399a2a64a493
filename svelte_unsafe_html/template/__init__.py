"""
Template Layer

Svelte component parsing into an immutable node tree.

Components:
- svelte_parser: SvelteTemplateParser (tree-sitter svelte markup → nodes, lifted script/style)
- nodes: Template node classes
- ignores: Suppression directives in HTML comments
"""

from svelte_unsafe_html.template.ignores import extract_ignores
from svelte_unsafe_html.template.nodes import (
    Comment,
    Fragment,
    NodeKind,
    RawMustacheTag,
    TemplateAst,
    TemplateNode,
    Text,
    to_dict,
)
from svelte_unsafe_html.template.svelte_parser import SvelteTemplateParser, create_svelte_parser

__all__ = [
    "Comment",
    "Fragment",
    "NodeKind",
    "RawMustacheTag",
    "SvelteTemplateParser",
    "TemplateAst",
    "TemplateNode",
    "Text",
    "create_svelte_parser",
    "extract_ignores",
    "to_dict",
]
