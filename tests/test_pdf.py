import zlib

import pytest

from docfingerprint.document.pdf import PdfDocument
from docfingerprint.errors import DocumentError


def stream(dictionary: bytes, data: bytes) -> bytes:
    return b"<<" + dictionary + b" /Length %d>>\nstream\n" % len(data) + data + b"\nendstream"


def build_pdf(objects, trailer=None):
    out = bytearray(b"%PDF-1.5\n%\xe2\xe3\xcf\xd3\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref = len(out)
    if trailer is not None:
        out += b"xref\n0 %d\n" % (len(objects) + 1)
        out += b"0000000000 65535 f \n"
        for offset in offsets:
            out += b"%010d 00000 n \n" % offset
        out += b"trailer\n" + trailer + b"\n"
    out += b"startxref\n%d\n%%%%EOF\n" % xref
    return bytes(out)


def minimal_pdf_with_metadata() -> bytes:
    content = stream(b" /Filter /FlateDecode", zlib.compress(b"BT ET"))
    return build_pdf(
        [
            b"<< /Type /Pages /Kids [2 0 R] /Count 1 >>",
            b"<< /Type /Page /Parent 1 0 R /Contents 3 0 R /MediaBox [0 0 300 300] >>",
            content,
            b"<< /Producer (fingerprint-test) /Title (Test PDF) >>",
            b"<< /Type /Catalog /Pages 1 0 R >>",
        ],
        trailer=b"<< /Size 6 /Root 5 0 R /Info 4 0 R >>",
    )


@pytest.fixture
def write_file(tmp_path):
    def _write(name, contents):
        path = tmp_path / name
        path.write_bytes(contents if isinstance(contents, bytes) else contents.encode())
        return path

    return _write


def test_opens_pdf_without_text_path(write_file):
    pdf = write_file("doc.pdf", "%PDF-1.4\n")
    document = PdfDocument.open(pdf, None)
    assert document.path == pdf
    assert document.text is None


def test_opens_pdf_with_markdown_text_path(write_file):
    pdf = write_file("doc.pdf", "%PDF-1.4\n")
    markdown = write_file("doc.md", "# Heading\n\nBody")
    document = PdfDocument.open(pdf, markdown)
    assert document.path == pdf
    assert document.text.path == markdown
    assert len(document.text.headings) == 1
    assert document.text.headings[0].text == "Heading"


def test_page_count_and_metadata_queries_work(write_file):
    document = PdfDocument.open(write_file("meta.pdf", minimal_pdf_with_metadata()))
    assert document.page_count() == 1
    metadata = document.metadata()
    assert ("Producer", "fingerprint-test") in metadata
    assert ("Title", "Test PDF") in metadata
    assert document.metadata_value("producer") == "fingerprint-test"


def test_metadata_access_fails_for_non_pdf_bytes(write_file):
    document = PdfDocument.open(write_file("bad.pdf", "not-a-pdf"))
    with pytest.raises(DocumentError, match="failed reading pdf"):
        document.page_count()
    with pytest.raises(DocumentError, match="failed reading pdf"):
        document.metadata()


def test_header_only_pdf_cannot_be_loaded(write_file):
    document = PdfDocument.open(write_file("empty.pdf", "%PDF-1.4\n"))
    with pytest.raises(DocumentError, match="no trailer"):
        document.page_count()


def test_missing_file_raises(tmp_path):
    document = PdfDocument.open(tmp_path / "absent.pdf")
    with pytest.raises(DocumentError, match="failed reading pdf"):
        document.metadata()


def test_metadata_is_sorted_by_key(write_file):
    document = PdfDocument.open(write_file("meta.pdf", minimal_pdf_with_metadata()))
    assert [key for key, _ in document.metadata()] == ["Producer", "Title"]


def test_metadata_value_missing_key_is_none(write_file):
    document = PdfDocument.open(write_file("meta.pdf", minimal_pdf_with_metadata()))
    assert document.metadata_value("Author") is None


def test_missing_info_raises(write_file):
    data = build_pdf(
        [
            b"<< /Type /Pages /Kids [] /Count 0 >>",
            b"<< /Type /Catalog /Pages 1 0 R >>",
        ],
        trailer=b"<< /Size 3 /Root 2 0 R >>",
    )
    document = PdfDocument.open(write_file("noinfo.pdf", data))
    assert document.page_count() == 0
    with pytest.raises(DocumentError, match="missing Info dictionary"):
        document.metadata()


def test_info_that_is_not_a_dictionary_raises(write_file):
    data = build_pdf(
        [b"<< /Type /Catalog >>", b"[1 2 3]"],
        trailer=b"<< /Root 1 0 R /Info 2 0 R >>",
    )
    document = PdfDocument.open(write_file("badinfo.pdf", data))
    with pytest.raises(DocumentError, match="not a dictionary"):
        document.metadata()


def test_unresolvable_info_reference_raises(write_file):
    data = build_pdf([b"<< /Type /Catalog >>"], trailer=b"<< /Root 1 0 R /Info 9 0 R >>")
    document = PdfDocument.open(write_file("dangling.pdf", data))
    with pytest.raises(DocumentError, match="unable to resolve Info dictionary reference"):
        document.metadata()


def test_metadata_value_kinds(write_file):
    info = (
        b"<< /Count 42 /Ratio 1.5 /Whole 2.0 /Flag true /Off false /Kind /Yes "
        b"/Hex <48656C6C6F> /Escaped (a\\(b\\)c\\n\\101) /Linked 2 0 R >>"
    )
    data = build_pdf(
        [b"<< /Type /Catalog >>", b"(linked value)"],
        trailer=b"<< /Root 1 0 R /Info " + info + b" >>",
    )
    metadata = dict(PdfDocument.open(write_file("kinds.pdf", data)).metadata())
    assert metadata == {
        "Count": "42",
        "Ratio": "1.5",
        "Whole": "2",
        "Flag": "true",
        "Off": "false",
        "Kind": "Yes",
        "Hex": "Hello",
        "Escaped": "a(b)c\nA",
        "Linked": "linked value",
    }


def test_nested_page_tree_is_counted(write_file):
    data = build_pdf(
        [
            b"<< /Type /Catalog /Pages 2 0 R >>",
            b"<< /Type /Pages /Kids [3 0 R 4 0 R] /Count 3 >>",
            b"<< /Type /Pages /Parent 2 0 R /Kids [5 0 R 6 0 R] /Count 2 >>",
            b"<< /Type /Page /Parent 2 0 R >>",
            b"<< /Type /Page /Parent 3 0 R >>",
            b"<< /Type /Page /Parent 3 0 R >>",
        ],
        trailer=b"<< /Size 7 /Root 1 0 R >>",
    )
    assert PdfDocument.open(write_file("tree.pdf", data)).page_count() == 3


def test_incremental_update_overrides_earlier_objects(write_file):
    base = build_pdf(
        [b"<< /Type /Catalog >>", b"<< /Title (Old) >>"],
        trailer=b"<< /Root 1 0 R /Info 2 0 R >>",
    )
    update = b"2 0 obj\n<< /Title (New) >>\nendobj\ntrailer\n<< /Root 1 0 R /Info 2 0 R >>\n"
    document = PdfDocument.open(write_file("updated.pdf", base + update))
    assert document.metadata_value("Title") == "New"