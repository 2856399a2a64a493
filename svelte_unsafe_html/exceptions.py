"""
svelte-unsafe-html Exception Hierarchy

Usage guide:
    1. Malformed component source → TemplateParseError (reported, never raised by analyze)
    2. Missing tree-sitter grammar → ParserUnavailableError (propagates)
    3. Bad settings → InvalidConfigurationError

Example:
    try:
        ast = parser.parse(source, "App.svelte")
    except TemplateParseError as e:
        print(e.code, e.position)
"""

from typing import Any

from svelte_unsafe_html.models import Position


class SvelteUnsafeHtmlError(Exception):
    """Base exception for all svelte-unsafe-html errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Optional additional details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


# ============================================================
# Infrastructure Errors
# ============================================================


class InfrastructureError(SvelteUnsafeHtmlError):
    """Infrastructure failures (grammars, file system)."""

    pass


class ParserUnavailableError(InfrastructureError):
    """A tree-sitter grammar could not be loaded."""

    pass


# ============================================================
# Validation Errors
# ============================================================


class ValidationError(SvelteUnsafeHtmlError):
    """Input validation failures."""

    pass


class InvalidConfigurationError(ValidationError):
    """Invalid configuration."""

    pass


# ============================================================
# Parsing Errors
# ============================================================


class ParsingError(SvelteUnsafeHtmlError):
    """Source parsing failures."""

    pass


class TemplateParseError(ParsingError):
    """
    Malformed component source.

    Attributes:
        code: Stable machine-readable error code (e.g. "unclosed-element")
        position: Where parsing failed
        offset: Character offset of the failure
        filename: File being parsed
    """

    def __init__(
        self,
        message: str,
        code: str = "parse-error",
        position: Position | None = None,
        offset: int | None = None,
        filename: str | None = None,
    ):
        super().__init__(message, details={"code": code})
        self.code = code
        self.position = position
        self.offset = offset
        self.filename = filename

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        where = f"{self.position.line}:{self.position.column}"
        if self.filename:
            where = f"{self.filename}:{where}"
        return f"{self.message} ({where})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "start": self.position.to_dict() if self.position else None,
            "pos": self.offset,
        }
