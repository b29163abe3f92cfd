"""Documents of unknown format, held as raw bytes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from docfingerprint.errors import DocumentError


@dataclass
class RawDocument:
    """A file's path and its bytes."""

    path: Path
    bytes: bytes

    @classmethod
    def open(cls, path) -> RawDocument:
        """Read a file's bytes."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as error:
            raise DocumentError(f"failed to read file '{path}': {error}") from error
        return cls(path=path, bytes=data)