"""
Source File representation
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from pathlib import Path

from svelte_unsafe_html.models import Position


@dataclass
class SourceFile:
    """
    Represents a component source file.

    Attributes:
        file_path: Path used to label findings
        content: File content as string
        language: Template language
        encoding: File encoding (default: utf-8)
    """

    file_path: str
    content: str
    language: str = "svelte"
    encoding: str = "utf-8"
    _line_starts: list[int] = field(default_factory=list, init=False, repr=False)
    _bmp_only: bool = field(default=True, init=False, repr=False)
    _byte_to_char: list[int] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        starts = [0]
        for index, char in enumerate(self.content):
            if char == "\n":
                starts.append(index + 1)
        self._line_starts = starts
        self._bmp_only = max(self.content, default="\0") < "\U00010000"

    @classmethod
    def from_file(cls, file_path: str | Path, encoding: str = "utf-8") -> "SourceFile":
        """
        Load source file from disk.

        Args:
            file_path: Path to file (kept as given for labeling)
            encoding: File encoding

        Returns:
            SourceFile instance

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid in the given encoding
        """
        content = Path(file_path).read_text(encoding=encoding)
        return cls(file_path=str(file_path), content=content, encoding=encoding)

    def position(self, offset: int) -> Position:
        """
        Convert a character offset to a position.

        Columns count UTF-16 code units, the unit Svelte tooling reports
        columns in; they differ from character counts only after a
        character outside the Basic Multilingual Plane (emoji, for example).

        Args:
            offset: Character offset (clamped to the content length)

        Returns:
            Position with 1-indexed line and 0-indexed column
        """
        offset = max(0, min(offset, len(self.content)))
        line_index = bisect_right(self._line_starts, offset) - 1
        line_start = self._line_starts[line_index]

        column = offset - line_start
        if not self._bmp_only:
            column = len(self.content[line_start:offset].encode("utf-16-le")) // 2
        return Position(line=line_index + 1, column=column)

    def char_offset(self, byte_offset: int) -> int:
        """
        Convert a UTF-8 byte offset (as reported by tree-sitter) to a character offset.
        """
        if self._byte_to_char is None:
            table: list[int] = []
            for index, char in enumerate(self.content):
                table.extend([index] * len(char.encode("utf-8")))
            table.append(len(self.content))
            self._byte_to_char = table
        return self._byte_to_char[max(0, min(byte_offset, len(self._byte_to_char) - 1))]

    @property
    def line_count(self) -> int:
        """Get total number of lines"""
        return len(self._line_starts)
