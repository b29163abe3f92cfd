"""Plain text documents split into logical lines."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from docfingerprint.errors import DocumentError


def _split_lines(content: str) -> list[str]:
    if not content:
        return []
    parts = content.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


@dataclass
class TextDocument:
    """A text file with its full content and its lines."""

    path: Path
    content: str
    lines: list[str]

    @classmethod
    def open(cls, path) -> TextDocument:
        """Read a UTF-8 text file."""
        path = Path(path)
        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise DocumentError(f"failed to read text file '{path}': {error}") from error
        return cls(path=path, content=content, lines=_split_lines(content))

    def line_count(self) -> int:
        """Number of logical lines."""
        return len(self.lines)