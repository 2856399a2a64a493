"""
Report models: source positions, findings and analysis reports.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from svelte_unsafe_html.exceptions import TemplateParseError


@dataclass(frozen=True, slots=True)
class Position:
    """
    A point in source text.

    Attributes:
        line: Line number (1-indexed)
        column: Column (0-indexed, in UTF-16 code units; equal to the
                character count unless the line holds astral characters)
    """

    line: int
    column: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Source code location (immutable).

    Attributes:
        start: First character of the range
        end: Position just past the last character
    """

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Finding:
    """One reported unsafe raw HTML insertion."""

    filename: str
    start: Position
    end: Position
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """
    Outcome of analysing one component.

    Invariants:
    - parsed=False implies error is set and warnings is empty
    - parsed=True implies error is None
    """

    filename: str
    parsed: bool
    error: "TemplateParseError | None" = None
    warnings: tuple[Finding, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls, filename: str, warnings: list[Finding]) -> "AnalysisReport":
        return cls(filename=filename, parsed=True, error=None, warnings=tuple(warnings))

    @classmethod
    def failure(cls, filename: str, error: "TemplateParseError") -> "AnalysisReport":
        return cls(filename=filename, parsed=False, error=error, warnings=())

    @property
    def is_clean(self) -> bool:
        """True if the file parsed and nothing was flagged"""
        return self.parsed and not self.warnings

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON-ready report shape."""
        return {
            "filename": self.filename,
            "parsed": self.parsed,
            "error": self.error.to_dict() if self.error is not None else None,
            "warnings": [finding.to_dict() for finding in self.warnings],
        }
