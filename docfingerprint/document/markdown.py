"""Markdown documents: normalization plus heading, section and table structure."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from docfingerprint.errors import DocumentError


def _split_lines(content: str) -> list[str]:
    """Split on newlines, dropping a trailing empty line and any carriage returns."""
    if not content:
        return []
    parts = content.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _is_table_row(line: str) -> bool:
    stripped = line.strip()
    return "|" in stripped and stripped.startswith("|") and stripped.endswith("|")


def _inner_cells(line: str) -> list[str]:
    """Cells of a pipe-delimited row, without the empty first and last pieces."""
    return [cell.strip() for cell in line.split("|")[1:-1]]


@dataclass
class Heading:
    """An ATX heading with its level and 1-based line number."""

    level: int
    text: str
    line: int


@dataclass
class Section:
    """A span of lines owned by a heading, or the preamble when heading is None."""

    heading: Heading | None
    start_line: int
    end_line: int
    content: str


@dataclass
class Table:
    """A pipe table with the text of the nearest preceding heading."""

    heading_ref: str | None
    index: int
    start_line: int
    end_line: int
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class MarkdownDocument:
    """A markdown file with its raw text, normalized text and parsed structure."""

    path: Path
    raw: str
    normalized: str
    headings: list[Heading]
    sections: list[Section]
    tables: list[Table]

    @classmethod
    def open(cls, path) -> MarkdownDocument:
        """Read a markdown file and parse its normalized structure."""
        path = Path(path)
        try:
            raw = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise DocumentError(
                f"failed to read markdown file '{path}': {error}"
            ) from error

        normalized = normalize_markdown(raw)
        headings = parse_headings(normalized)
        return cls(
            path=path,
            raw=raw,
            normalized=normalized,
            headings=headings,
            sections=compute_sections(normalized, headings),
            tables=parse_tables(normalized, headings),
        )


def normalize_markdown(content: str) -> str:
    """Apply every normalization pass in order."""
    result = convert_setext_to_atx(content)
    result = convert_bold_as_heading(result)
    result = normalize_whitespace(result)
    return normalize_table_pipes(result)


def convert_setext_to_atx(content: str) -> str:
    """Rewrite setext headings (underlined with = or -) as ATX headings."""
    lines = _split_lines(content)
    result: list[str] = []
    i = 0
    while i < len(lines):
        if i + 1 < len(lines):
            current = lines[i].strip()
            underline = lines[i + 1]
            all_equals = all(c == "=" for c in underline)
            all_dashes = all(c == "-" for c in underline)
            if (
                current
                and (all_equals or all_dashes)
                and _byte_len(underline) >= _byte_len(current)
            ):
                level = 1 if all_equals else 2
                result.append(f"{'#' * level} {current}")
                i += 2
                continue
        result.append(lines[i])
        i += 1
    return "\n".join(result)


def convert_bold_as_heading(content: str) -> str:
    """Turn a standalone **bold** line between blank lines into a level-2 heading."""
    lines = _split_lines(content)
    result: list[str] = []
    last = len(lines) - 1
    for i, line in enumerate(lines):
        trimmed = line.strip()
        if trimmed.startswith("**") and trimmed.endswith("**") and _byte_len(trimmed) > 4:
            text = trimmed[2:-2].strip()
            prev_blank = i == 0 or not lines[i - 1].strip()
            next_blank = i == last or not lines[i + 1].strip()
            if prev_blank and next_blank and text:
                result.append(f"## {text}")
                continue
        result.append(line)
    return "\n".join(result)


def normalize_whitespace(content: str) -> str:
    """Strip trailing whitespace and collapse runs of blank lines to one."""
    result: list[str] = []
    prev_was_blank = False
    for line in _split_lines(content):
        trimmed = line.rstrip()
        is_blank = not trimmed
        if is_blank and prev_was_blank:
            continue
        result.append(trimmed)
        prev_was_blank = is_blank
    return "\n".join(result)


def normalize_table_pipes(content: str) -> str:
    """Normalize spacing around the pipes of table rows."""
    result = []
    for line in _split_lines(content):
        if _is_table_row(line):
            result.append(" | ".join(cell.strip() for cell in line.split("|")))
        else:
            result.append(line)
    return "\n".join(result)


def parse_headings(content: str) -> list[Heading]:
    """Collect ATX headings of levels 1 to 6."""
    headings = []
    for line_number, line in enumerate(_split_lines(content), start=1):
        trimmed = line.strip()
        if not trimmed.startswith("#"):
            continue
        level = len(trimmed) - len(trimmed.lstrip("#"))
        if 1 <= level <= 6:
            headings.append(
                Heading(level=level, text=trimmed[level:].strip(), line=line_number)
            )
    return headings


def compute_sections(content: str, headings: list[Heading]) -> list[Section]:
    """Split content into a preamble and one section per heading.

    A section runs until the next heading at the same or a shallower level.
    """
    lines = _split_lines(content)
    if not headings:
        return [Section(None, 1, len(lines), "\n".join(lines))]

    sections = []
    first_line = headings[0].line
    if lines and first_line > 1:
        preamble_end = first_line - 1
        sections.append(Section(None, 1, preamble_end, "\n".join(lines[:preamble_end])))

    for position, heading in enumerate(headings):
        end_line = next(
            (
                later.line - 1
                for later in headings[position + 1 :]
                if later.level <= heading.level
            ),
            len(lines),
        )
        start_line = heading.line
        if start_line <= len(lines):
            section_lines = lines[start_line - 1 : min(end_line, len(lines))]
        else:
            section_lines = []
        sections.append(Section(heading, start_line, end_line, "\n".join(section_lines)))
    return sections


def parse_tables(content: str, headings: list[Heading]) -> list[Table]:
    """Find pipe tables, skipping a separator row directly after the header."""
    lines = _split_lines(content)
    tables = []
    i = 0
    while i < len(lines):
        if not _is_table_row(lines[i]):
            i += 1
            continue

        table_start = table_end = i
        header = _inner_cells(lines[i].strip())
        rows = []
        j = i + 1
        while j < len(lines) and _is_table_row(lines[j]):
            row_line = lines[j].strip()
            if "-" in row_line and j == i + 1:
                j += 1
                continue
            rows.append(_inner_cells(row_line))
            table_end = j
            j += 1

        heading_ref = next(
            (h.text for h in reversed(headings) if h.line < table_start + 1), None
        )
        tables.append(
            Table(
                heading_ref=heading_ref,
                index=len(tables),
                start_line=table_start + 1,
                end_line=table_end + 1,
                headers=header,
                rows=rows,
            )
        )
        i = table_end + 1
    return tables