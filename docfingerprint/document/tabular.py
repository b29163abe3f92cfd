"""Tabular documents: CSV files read by header, and spreadsheets by path."""

from __future__ import annotations

import csv
from collections.abc import Iterator
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path

from docfingerprint.errors import DocumentError


@dataclass
class XlsxDocument:
    """A spreadsheet workbook, identified by its path."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)


@dataclass
class CsvDocument:
    """A CSV file with a header row, read afresh on every query."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @classmethod
    def open(cls, path) -> CsvDocument:
        """Open a CSV file, checking that its header row can be read."""
        document = cls(Path(path))
        document.headers()
        return document

    def _records(self) -> Iterator[list[str]]:
        """Yield the header record, then every data record.

        Blank lines are skipped and every record must have as many fields
        as the header.
        """
        try:
            handle = self.path.open(encoding="utf-8-sig", newline="")
        except OSError as error:
            raise DocumentError(f"failed to open CSV '{self.path}': {error}") from error

        with handle:
            reader = csv.reader(handle)
            expected: int | None = None
            while True:
                try:
                    record = next(reader)
                except StopIteration:
                    break
                except (csv.Error, UnicodeDecodeError, OSError) as error:
                    if expected is None:
                        message = f"failed to read CSV headers '{self.path}': {error}"
                    else:
                        message = f"failed to read CSV record from '{self.path}': {error}"
                    raise DocumentError(message) from error

                if not record:
                    continue
                if expected is None:
                    expected = len(record)
                elif len(record) != expected:
                    raise DocumentError(
                        f"failed to read CSV record from '{self.path}': "
                        f"found record with {len(record)} fields, "
                        f"but the previous record has {expected} fields"
                    )
                yield record

            if expected is None:
                yield []

    def headers(self) -> list[str]:
        """CSV headers in source order."""
        with closing(self._records()) as records:
            return next(records)

    def rows(self) -> list[list[str]]:
        """All records except the header row."""
        return list(self._records())[1:]

    def cell_by_column(self, row_index: int, column_name: str) -> str | None:
        """The value in the named column of a data row, or None past the last row."""
        headers = self.headers()
        try:
            column_index = headers.index(column_name)
        except ValueError:
            raise DocumentError(
                f"column '{column_name}' not found in CSV '{self.path}'"
            ) from None

        with closing(self._records()) as records:
            next(records)
            for index, record in enumerate(records):
                if index == row_index:
                    return record[column_index]
        return None