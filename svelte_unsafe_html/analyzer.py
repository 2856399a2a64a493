"""
Analysis entry points.

    report = analyze("<div>{@html html}</div>", "App.svelte", sanitizers=["sanitize"])
    report.to_dict()
    # {"filename": "App.svelte", "parsed": True, "error": None, "warnings": [...]}

A component that fails to parse yields a report with parsed=False and the
parse error; the rule is not run on it.
"""

from collections.abc import Iterable
from pathlib import Path

from svelte_unsafe_html.exceptions import TemplateParseError
from svelte_unsafe_html.models import AnalysisReport
from svelte_unsafe_html.observability import LogPerformance, get_logger, log_error
from svelte_unsafe_html.parsing.source_file import SourceFile
from svelte_unsafe_html.rules.unsafe_html import detect
from svelte_unsafe_html.template.svelte_parser import SvelteTemplateParser

logger = get_logger(__name__)

_parser = SvelteTemplateParser()


def analyze(
    source: str,
    filename: str,
    sanitizers: Iterable[str] = (),
    modern: bool = False,
) -> AnalysisReport:
    """
    Analyze one component for unsafe raw HTML insertions.

    Args:
        source: Component source text
        filename: Label used in the report and findings
        sanitizers: Trusted sanitizer function names
        modern: Parse with the Svelte 5 template dialect

    Returns:
        AnalysisReport (never raises for malformed source)
    """
    allow_list = frozenset(sanitizers)

    # Logs analysis_complete (with timing) on exit
    with LogPerformance(logger, "analysis", filename=filename) as perf:
        try:
            ast = _parser.parse(source, filename, modern=modern)
        except TemplateParseError as e:
            log_error(logger, "template_parse_failed", e, filename=filename, code=e.code)
            perf.extra["parsed"] = False
            return AnalysisReport.failure(filename, e)

        warnings = detect(ast.fragment, filename, allow_list)
        perf.extra["warnings"] = len(warnings)

    return AnalysisReport.success(filename, warnings)


def analyze_file(
    path: str | Path,
    sanitizers: Iterable[str] = (),
    modern: bool = False,
) -> AnalysisReport:
    """
    Read a component from disk (UTF-8) and analyze it.

    The report filename is the path as given.
    """
    source = SourceFile.from_file(path)
    return analyze(source.content, source.file_path, sanitizers=sanitizers, modern=modern)
