"""
svelte-unsafe-html

Security lint for Svelte components: reports `{@html}` raw HTML insertions
that are neither wrapped in an allow-listed sanitizer call nor marked with an
adjacent suppression comment.
"""

from svelte_unsafe_html.analyzer import analyze, analyze_file
from svelte_unsafe_html.exceptions import SvelteUnsafeHtmlError, TemplateParseError
from svelte_unsafe_html.models import AnalysisReport, Finding, Position
from svelte_unsafe_html.rules.unsafe_html import MESSAGE, RULE_ID, detect

__version__ = "0.1.0"

__all__ = [
    "AnalysisReport",
    "Finding",
    "MESSAGE",
    "Position",
    "RULE_ID",
    "SvelteUnsafeHtmlError",
    "TemplateParseError",
    "analyze",
    "analyze_file",
    "detect",
]
