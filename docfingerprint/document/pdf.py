"""PDF documents: page count and Info metadata, with optional extracted text."""

from __future__ import annotations

import re
import zlib
from dataclasses import dataclass
from pathlib import Path

from docfingerprint.document.markdown import MarkdownDocument
from docfingerprint.errors import DocumentError

_WHITESPACE = frozenset(b"\x00\t\n\x0c\r ")
_DELIMITERS = frozenset(b"()<>[]{}/%")
_INT_RE = re.compile(rb"[+-]?\d+")
_REAL_RE = re.compile(rb"[+-]?(?:\d+\.\d*|\.\d+)")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_MARKER_RE = re.compile(
    rb"(?<!\d)(?P<number>\d+)\s+(?P<generation>\d+)\s+obj\b|(?P<trailer>\btrailer\b)"
)
_ESCAPES = {
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("("): b"(",
    ord(")"): b")",
    ord("\\"): b"\\",
}


class _PdfError(Exception):
    """The bytes are not a PDF this reader understands."""


@dataclass(frozen=True)
class _Name:
    value: bytes


@dataclass(frozen=True)
class _String:
    value: bytes


@dataclass(frozen=True)
class _Ref:
    number: int
    generation: int


@dataclass
class _Stream:
    dictionary: dict
    raw: bytes

    def decoded(self) -> bytes:
        filters = self.dictionary.get(b"Filter")
        if filters is None:
            names = []
        elif isinstance(filters, list):
            names = filters
        else:
            names = [filters]
        data = self.raw
        for name in names:
            if name in (_Name(b"FlateDecode"), _Name(b"Fl")):
                try:
                    data = zlib.decompress(data)
                except zlib.error as error:
                    raise _PdfError(f"cannot inflate stream: {error}") from error
            else:
                raise _PdfError(f"unsupported stream filter {name!r}")
        return data


class _Parser:
    """Reads PDF objects from a byte buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = data

    def skip_whitespace(self, pos: int) -> int:
        data, size = self.data, len(self.data)
        while pos < size:
            byte = data[pos]
            if byte in _WHITESPACE:
                pos += 1
            elif byte == ord("%"):
                while pos < size and data[pos] not in b"\r\n":
                    pos += 1
            else:
                break
        return pos

    def _regular(self, pos: int) -> tuple[bytes, int]:
        data, end = self.data, pos
        while end < len(data) and data[end] not in _WHITESPACE and data[end] not in _DELIMITERS:
            end += 1
        return data[pos:end], end

    def parse_object(self, pos: int):
        data = self.data
        pos = self.skip_whitespace(pos)
        if pos >= len(data):
            raise _PdfError("unexpected end of data")
        if data.startswith(b"<<", pos):
            return self._dictionary(pos + 2)
        byte = data[pos]
        if byte == ord("<"):
            return self._hex_string(pos + 1)
        if byte == ord("("):
            return self._literal_string(pos + 1)
        if byte == ord("["):
            return self._array(pos + 1)
        if byte == ord("/"):
            return self._name(pos + 1)

        token, end = self._regular(pos)
        if token == b"true":
            return True, end
        if token == b"false":
            return False, end
        if token == b"null":
            return None, end
        if _INT_RE.fullmatch(token):
            value = int(token)
            reference = self._reference(value, end)
            return reference if reference is not None else (value, end)
        if _REAL_RE.fullmatch(token):
            return float(token), end
        raise _PdfError(f"unexpected token at offset {pos}")

    def _reference(self, number: int, pos: int):
        generation, pos = self._regular(self.skip_whitespace(pos))
        if not generation.isdigit():
            return None
        marker, pos = self._regular(self.skip_whitespace(pos))
        if marker != b"R":
            return None
        return _Ref(number, int(generation)), pos

    def _name(self, pos: int) -> tuple[_Name, int]:
        token, end = self._regular(pos)
        decoded = re.sub(
            rb"#([0-9A-Fa-f]{2})", lambda match: bytes([int(match.group(1), 16)]), token
        )
        return _Name(decoded), end

    def _dictionary(self, pos: int) -> tuple[dict, int]:
        result: dict = {}
        while True:
            pos = self.skip_whitespace(pos)
            if self.data.startswith(b">>", pos):
                return result, pos + 2
            key, pos = self.parse_object(pos)
            if not isinstance(key, _Name):
                raise _PdfError("dictionary key is not a name")
            value, pos = self.parse_object(pos)
            result[key.value] = value

    def _array(self, pos: int) -> tuple[list, int]:
        items = []
        while True:
            pos = self.skip_whitespace(pos)
            if pos < len(self.data) and self.data[pos] == ord("]"):
                return items, pos + 1
            item, pos = self.parse_object(pos)
            items.append(item)

    def _hex_string(self, pos: int) -> tuple[_String, int]:
        end = self.data.find(b">", pos)
        if end < 0:
            raise _PdfError("unterminated hex string")
        digits = bytes(b for b in self.data[pos:end] if b in _HEX_DIGITS)
        if len(digits) % 2:
            digits += b"0"
        return _String(bytes.fromhex(digits.decode("ascii"))), end + 1

    def _literal_string(self, pos: int) -> tuple[_String, int]:
        data, size = self.data, len(self.data)
        out = bytearray()
        depth = 1
        while pos < size:
            byte = data[pos]
            if byte == ord("\\"):
                pos += 1
                if pos >= size:
                    break
                escaped = data[pos]
                if escaped in _ESCAPES:
                    out += _ESCAPES[escaped]
                    pos += 1
                elif ord("0") <= escaped <= ord("7"):
                    end = pos
                    while end < size and end - pos < 3 and ord("0") <= data[end] <= ord("7"):
                        end += 1
                    out.append(int(data[pos:end], 8) & 0xFF)
                    pos = end
                elif escaped == ord("\r"):
                    pos += 2 if data.startswith(b"\r\n", pos) else 1
                elif escaped == ord("\n"):
                    pos += 1
                else:
                    out.append(escaped)
                    pos += 1
                continue
            if byte == ord("("):
                depth += 1
            elif byte == ord(")"):
                depth -= 1
                if depth == 0:
                    return _String(bytes(out)), pos + 1
            out.append(byte)
            pos += 1
        raise _PdfError("unterminated literal string")

    def parse_indirect(self, pos: int):
        """Parse the body of an indirect object that starts after 'obj'."""
        obj, pos = self.parse_object(pos)
        after = self.skip_whitespace(pos)
        if isinstance(obj, dict) and self.data.startswith(b"stream", after):
            obj, pos = self._stream(obj, after + 6)
        after = self.skip_whitespace(pos)
        if self.data.startswith(b"endobj", after):
            pos = after + 6
        return obj, pos

    def _stream(self, dictionary: dict, start: int) -> tuple[_Stream, int]:
        data = self.data
        if data.startswith(b"\r\n", start):
            start += 2
        elif start < len(data) and data[start] in (0x0A, 0x0D):
            start += 1

        length = dictionary.get(b"Length")
        if isinstance(length, int) and not isinstance(length, bool) and length >= 0:
            end = start + length
            after = self.skip_whitespace(end)
            if data.startswith(b"endstream", after):
                return _Stream(dictionary, data[start:end]), after + 9

        end = data.find(b"endstream", start)
        if end < 0:
            raise _PdfError("unterminated stream")
        raw = data[start:end]
        if raw.endswith(b"\r\n"):
            raw = raw[:-2]
        elif raw.endswith((b"\n", b"\r")):
            raw = raw[:-1]
        return _Stream(dictionary, raw), end + 9


class _PdfFile:
    """The objects and trailer of a loaded PDF file."""

    def __init__(self, data: bytes) -> None:
        if b"%PDF-" not in data[:1024]:
            raise _PdfError("invalid file header")
        self.objects: dict[tuple[int, int], object] = {}
        self.trailer: dict = {}
        self._scan(_Parser(data))
        self._expand_object_streams()
        if not self.trailer:
            raise _PdfError("no trailer found")

    def _scan(self, parser: _Parser) -> None:
        pos = 0
        while (match := _MARKER_RE.search(parser.data, pos)) is not None:
            try:
                if match.group("trailer") is not None:
                    obj, end = parser.parse_object(match.end())
                    if isinstance(obj, dict):
                        self.trailer.update(obj)
                else:
                    obj, end = parser.parse_indirect(match.end())
                    key = (int(match.group("number")), int(match.group("generation")))
                    self.objects[key] = obj
                    if isinstance(obj, _Stream) and obj.dictionary.get(b"Type") == _Name(b"XRef"):
                        self.trailer.update(obj.dictionary)
            except _PdfError:
                pos = match.end()
                continue
            pos = end

    def _expand_object_streams(self) -> None:
        for obj in list(self.objects.values()):
            if isinstance(obj, _Stream) and obj.dictionary.get(b"Type") == _Name(b"ObjStm"):
                try:
                    self._expand(obj)
                except _PdfError:
                    continue

    def _expand(self, stream: _Stream) -> None:
        count = stream.dictionary.get(b"N")
        first = stream.dictionary.get(b"First")
        if not isinstance(count, int) or not isinstance(first, int):
            raise _PdfError("object stream without N or First")
        parser = _Parser(stream.decoded())
        pos = 0
        entries = []
        for _ in range(count):
            number, pos = parser.parse_object(pos)
            offset, pos = parser.parse_object(pos)
            if not isinstance(number, int) or not isinstance(offset, int):
                raise _PdfError("malformed object stream header")
            entries.append((number, offset))
        for number, offset in entries:
            obj, _ = parser.parse_object(first + offset)
            self.objects.setdefault((number, 0), obj)

    def get(self, reference: _Ref):
        try:
            return self.objects[(reference.number, reference.generation)]
        except KeyError:
            raise _PdfError(
                f"object {reference.number} {reference.generation} R not found"
            ) from None

    def resolve(self, obj):
        seen = set()
        while isinstance(obj, _Ref):
            if obj in seen:
                raise _PdfError("reference cycle")
            seen.add(obj)
            obj = self.get(obj)
        return obj

    def page_count(self) -> int:
        try:
            root = self.resolve(self.trailer.get(b"Root"))
        except _PdfError:
            return 0
        if not isinstance(root, dict):
            return 0

        stack = [root.get(b"Pages")]
        visited: set[_Ref] = set()
        count = 0
        while stack:
            node = stack.pop()
            if isinstance(node, _Ref):
                if node in visited:
                    continue
                visited.add(node)
                try:
                    node = self.resolve(node)
                except _PdfError:
                    continue
            if not isinstance(node, dict):
                continue
            kind = node.get(b"Type")
            if kind == _Name(b"Page"):
                count += 1
            elif kind == _Name(b"Pages") or b"Kids" in node:
                try:
                    kids = self.resolve(node.get(b"Kids"))
                except _PdfError:
                    continue
                if isinstance(kids, list):
                    stack.extend(reversed(kids))
        return count


def _lossy(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _format_real(value: float) -> str:
    return str(int(value)) if value.is_integer() else repr(value)


def _describe(obj) -> str:
    if obj is None:
        return "Null"
    if isinstance(obj, bool):
        return f"Boolean({str(obj).lower()})"
    if isinstance(obj, int):
        return f"Integer({obj})"
    if isinstance(obj, float):
        return f"Real({_format_real(obj)})"
    if isinstance(obj, _Name):
        return f"Name({_lossy(obj.value)!r})"
    if isinstance(obj, _String):
        return f"String({_lossy(obj.value)!r})"
    if isinstance(obj, _Ref):
        return f"Reference(({obj.number}, {obj.generation}))"
    if isinstance(obj, list):
        return "Array([" + ", ".join(_describe(item) for item in obj) + "])"
    if isinstance(obj, dict):
        entries = ", ".join(f"{_lossy(key)!r}: {_describe(value)}" for key, value in obj.items())
        return "Dictionary({" + entries + "})"
    if isinstance(obj, _Stream):
        return f"Stream({_describe(obj.dictionary)}, {len(obj.raw)} bytes)"
    return repr(obj)


def _as_string(pdf: _PdfFile, obj) -> str:
    if isinstance(obj, (_String, _Name)):
        return _lossy(obj.value)
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, float):
        return _format_real(obj)
    if isinstance(obj, _Ref):
        try:
            resolved = pdf.resolve(obj)
        except _PdfError as error:
            raise DocumentError(f"unable to resolve metadata reference: {error}") from error
        return _as_string(pdf, resolved)
    return _describe(obj)


def _ascii_fold(text: str) -> str:
    return "".join(c.lower() if c.isascii() else c for c in text)


@dataclass
class PdfDocument:
    """A PDF file, with the markdown extracted from it when one was supplied."""

    path: Path
    text: MarkdownDocument | None = None

    @classmethod
    def open(cls, path, text_path=None) -> PdfDocument:
        """Wrap a PDF path, loading its markdown text when text_path is given."""
        text = MarkdownDocument.open(text_path) if text_path is not None else None
        return cls(path=Path(path), text=text)

    def _load(self) -> _PdfFile:
        try:
            return _PdfFile(self.path.read_bytes())
        except (OSError, _PdfError) as error:
            raise DocumentError(f"failed reading pdf '{self.path}': {error}") from error

    def page_count(self) -> int:
        """Number of pages in the page tree."""
        return self._load().page_count()

    def metadata(self) -> list[tuple[str, str]]:
        """Key/value pairs of the trailer's Info dictionary, sorted by key."""
        pdf = self._load()
        info = pdf.trailer.get(b"Info")
        if info is None:
            raise DocumentError("missing Info dictionary in trailer: key 'Info' not found")
        if isinstance(info, _Ref):
            try:
                info = pdf.resolve(info)
            except _PdfError as error:
                raise DocumentError(
                    f"unable to resolve Info dictionary reference: {error}"
                ) from error
        if not isinstance(info, dict):
            raise DocumentError(
                f"Info object is not a dictionary: found {_describe(info)}"
            )

        pairs = [(_lossy(key), _as_string(pdf, value)) for key, value in info.items()]
        return sorted(pairs, key=lambda pair: pair[0])

    def metadata_value(self, key: str) -> str | None:
        """The metadata value whose key matches, ignoring ASCII case."""
        wanted = _ascii_fold(key)
        return next(
            (value for candidate, value in self.metadata() if _ascii_fold(candidate) == wanted),
            None,
        )