"""
Parsing Layer

Tree-sitter based parsing: the svelte markup grammar and the script language
embedded in components.

Components:
- parser_registry: Language parser management (per-thread parsers)
- source_file: Source file representation and offset → line/column mapping
- js_scanner: Lexical scanning of tag bodies
- expression: Tag expression and <script> parsing
"""

from svelte_unsafe_html.parsing.expression import Expression, ExpressionParser
from svelte_unsafe_html.parsing.parser_registry import ParserRegistry, get_registry
from svelte_unsafe_html.parsing.source_file import SourceFile

__all__ = [
    "Expression",
    "ExpressionParser",
    "ParserRegistry",
    "get_registry",
    "SourceFile",
]
