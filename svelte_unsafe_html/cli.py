"""
svelte-unsafe-html CLI

Usage:
    svelte-unsafe-html check src/ --sanitizer sanitize
    svelte-unsafe-html check App.svelte --modern --format json
    svelte-unsafe-html parse App.svelte

Exit codes (check):
    0  no findings
    1  at least one unsafe insertion
    2  at least one file could not be read or parsed
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from svelte_unsafe_html.analyzer import analyze_file
from svelte_unsafe_html.config import get_settings
from svelte_unsafe_html.exceptions import InvalidConfigurationError, TemplateParseError
from svelte_unsafe_html.models import AnalysisReport
from svelte_unsafe_html.observability import setup_logging
from svelte_unsafe_html.parsing.source_file import SourceFile
from svelte_unsafe_html.rules.unsafe_html import RULE_ID
from svelte_unsafe_html.template.nodes import to_dict
from svelte_unsafe_html.template.svelte_parser import create_svelte_parser

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_PARSE_ERROR = 2

app = typer.Typer(
    name="svelte-unsafe-html",
    help="Find {@html} insertions in Svelte components that bypass sanitization",
    add_completion=False,
)

console = Console(highlight=False, emoji=False)


def _load_settings():
    try:
        return get_settings()
    except InvalidConfigurationError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=EXIT_PARSE_ERROR) from e


def collect_files(paths: list[Path], extensions: list[str]) -> list[Path]:
    """Expand directories (recursively, by extension); files are kept as given."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(p for p in path.rglob("*") if p.is_file() and p.suffix in extensions))
        else:
            files.append(path)
    return files


def exit_code(reports: list[AnalysisReport]) -> int:
    if any(not report.parsed for report in reports):
        return EXIT_PARSE_ERROR
    if any(report.warnings for report in reports):
        return EXIT_FINDINGS
    return EXIT_CLEAN


def _print_text(reports: list[AnalysisReport]) -> None:
    findings = 0
    failed = 0

    for report in reports:
        if not report.parsed:
            failed += 1
            error = report.error
            line, column = (error.position.line, error.position.column) if error.position else (1, 0)
            console.print(
                f"{escape(report.filename)}:{line}:{column}: [red]parse error[/red] "
                f"{escape(error.message)} {escape(f'[{error.code}]')}",
                soft_wrap=True,
            )
            continue

        for finding in report.warnings:
            findings += 1
            console.print(
                f"{escape(finding.filename)}:{finding.start.line}:{finding.start.column}: "
                f"[yellow]{escape(finding.message)}[/yellow] {escape(f'[{RULE_ID}]')}",
                soft_wrap=True,
            )

    if findings == 0 and failed == 0:
        console.print(f"[green]✅ {len(reports)} file(s) checked, no unsafe raw HTML[/green]")
        return

    summary = f"❌ {findings} unsafe insertion(s) in {len(reports)} file(s) checked"
    if failed:
        summary += f", {failed} file(s) failed to parse"
    console.print(f"[bold red]{summary}[/bold red]")


@app.command()
def check(
    paths: list[Path] = typer.Argument(..., exists=True, help="Components or directories to check"),
    sanitizer: list[str] = typer.Option([], "--sanitizer", "-s", help="Trusted sanitizer function name (repeatable)"),
    modern: bool = typer.Option(False, "--modern", help="Parse with the Svelte 5 template dialect"),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level (default from settings)"),
):
    """
    Check components for unsafe {@html} insertions.
    """
    if output_format not in ("text", "json"):
        raise typer.BadParameter("must be 'text' or 'json'", param_hint="--format")

    settings = _load_settings()
    setup_logging(level=log_level or settings.log_level, format=settings.log_format)

    sanitizers = sorted(set(settings.sanitizers) | set(sanitizer))
    use_modern = modern or settings.modern

    reports: list[AnalysisReport] = []
    unreadable = 0
    for path in collect_files(paths, settings.extensions):
        try:
            reports.append(analyze_file(path, sanitizers=sanitizers, modern=use_modern))
        except (OSError, UnicodeDecodeError) as e:
            typer.echo(f"❌ {path}: cannot read file ({e})", err=True)
            unreadable += 1

    if output_format == "json":
        typer.echo(json.dumps([report.to_dict() for report in reports], indent=2))
    else:
        _print_text(reports)

    raise typer.Exit(code=EXIT_PARSE_ERROR if unreadable else exit_code(reports))


@app.command()
def parse(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Component to parse"),
    modern: bool = typer.Option(False, "--modern", help="Parse with the Svelte 5 template dialect"),
):
    """
    Print the parsed template tree as JSON (debugging aid).
    """
    settings = _load_settings()
    setup_logging(level=settings.log_level, format=settings.log_format)

    try:
        source = SourceFile.from_file(path)
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"❌ {path}: cannot read file ({e})", err=True)
        raise typer.Exit(code=EXIT_PARSE_ERROR) from e

    try:
        ast = create_svelte_parser().parse(source.content, source.file_path, modern=modern or settings.modern)
    except TemplateParseError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=EXIT_PARSE_ERROR) from e

    typer.echo(json.dumps(to_dict(ast), indent=2))


if __name__ == "__main__":
    app()
