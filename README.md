# docfingerprint

Document access and schema tooling for content fingerprinting.

`docfingerprint` opens documents of several formats behind a common set
of small classes, normalises Markdown into a predictable structure
(headings, sections, tables), reads PDF page counts and Info metadata,
and builds the JSON Schema for `.fp.yaml` fingerprint definitions. It
also holds the command-line argument model and exit-code mapping of the
fingerprint tool.

It uses only the Python standard library and supports Python 3.10 and
later.

## Installation

```
pip install docfingerprint
```

To run the test suite:

```
pip install "docfingerprint[test]"
pytest
```

## Opening documents

`docfingerprint.document.dispatch` chooses a document class from an
extension, matched without regard to case:

| Extension            | Document class     |
|----------------------|--------------------|
| `xlsx`, `xls`        | `XlsxDocument`     |
| `csv`                | `CsvDocument`      |
| `pdf`                | `PdfDocument`      |
| `md`, `markdown`     | `MarkdownDocument` |
| `txt`, `text`        | `TextDocument`     |
| anything else        | `RawDocument`      |

```python
from docfingerprint.document.dispatch import (
    open_document,
    open_document_from_path,
    open_document_with_text_path,
)

doc = open_document_from_path("report.md")   # extension taken from the path
doc = open_document("export.bin", "csv")     # extension given explicitly

# A PDF may be paired with a Markdown rendering of its text.
pdf = open_document_with_text_path("appraisal.pdf", "pdf", "appraisal.md")
print(pdf.text.headings[0].text)
```

Markdown, text and raw files are read when opened; a PDF is read only
when its pages or metadata are asked for; `XlsxDocument` and
`CsvDocument` returned by dispatch only hold the path. A file with no
extension is opened as a `RawDocument`. Failures to read a file raise
`docfingerprint.errors.DocumentError`.

## Markdown structure

`MarkdownDocument.open(path)` keeps the raw text and normalises it
before parsing: setext headings become ATX headings, a lone `**Bold**`
line between blank lines becomes a level-2 heading, trailing whitespace
is stripped, runs of blank lines collapse to one, and table pipes are
evenly spaced.

```python
from docfingerprint.document.markdown import MarkdownDocument

doc = MarkdownDocument.open("financial_summary.md")
print(doc.raw, doc.normalized)

for heading in doc.headings:          # Heading(level, text, line)
    print(heading.level, heading.text, heading.line)

for section in doc.sections:          # Section(heading, start_line, end_line, content)
    title = section.heading.text if section.heading else "(preamble)"
    print(title, section.start_line, section.end_line)

for table in doc.tables:              # Table(heading_ref, index, start_line, end_line, headers, rows)
    print(table.heading_ref, table.headers, len(table.rows))
```

Line numbers are 1-based. A section runs from its heading to the line
before the next heading of the same or a shallower level; content before
the first heading forms a preamble section with no heading. A separator
row directly under a table's header row is skipped, and each table
records the text of the nearest heading above it.

Each pass is also available on its own: `normalize_markdown`,
`convert_setext_to_atx`, `convert_bold_as_heading`,
`normalize_whitespace`, `normalize_table_pipes`, `parse_headings`,
`compute_sections` and `parse_tables`.

## Other formats

```python
from docfingerprint.document.text import TextDocument
from docfingerprint.document.raw import RawDocument
from docfingerprint.document.tabular import CsvDocument
from docfingerprint.document.pdf import PdfDocument

text = TextDocument.open("notes.txt")
print(text.content, text.lines, text.line_count())

raw = RawDocument.open("blob.bin")
print(len(raw.bytes))

csv_doc = CsvDocument.open("rent_roll.csv")  # checks the header row can be read
print(csv_doc.headers())
print(csv_doc.rows())                        # every record after the header
print(csv_doc.cell_by_column(1, "city"))     # None past the last row

pdf = PdfDocument.open("sample.pdf", None)
print(pdf.page_count())
print(pdf.metadata())                        # (key, value) pairs sorted by key
print(pdf.metadata_value("producer"))        # key match ignores ASCII case
```

`CsvDocument` rereads the file for every query, skips blank lines and
raises `DocumentError` for an unknown column name or a record whose
field count differs from the header's. `PdfDocument` reads plain and
Flate-compressed objects, including object streams; `metadata` raises
`DocumentError` when the trailer has no Info dictionary.

## Fingerprint DSL schema

```python
from docfingerprint.compile.schema import dsl_schema, dsl_json_schema
from docfingerprint.compile.schema_defs import assertion_definitions

schema = dsl_schema()           # a fresh dict on every call
text = dsl_json_schema()        # the same schema as indented JSON with sorted keys
defs = assertion_definitions()  # assertion sub-schemas keyed by definition name
```

The schema requires `fingerprint_id`, `format` and `assertions`, allows
`valid_from`, `valid_until`, `parent`, `extract` and `content_hash`, and
describes every assertion kind, extract sections and the content-hash
configuration. The `range_populated`, `sum_eq` and `within_tolerance`
assertion kinds are marked `"x-runtime-support": "unsupported_in_v0_1"`.

## Command-line model

`docfingerprint.cli.args` describes the fingerprint tool's command line:
the run-mode options (`INPUT`, `--fp`, `--list`, `--jobs`,
`--no-witness`, `--progress`, `--diagnose`, `--describe`, `--schema`)
and the `compile`, `witness query|last|count`, `infer` and
`infer-schema` subcommands. `parse_args` returns a `Cli` dataclass whose
`command` is a `CompileCommand`, `WitnessCommand`, `InferCommand`,
`InferSchemaCommand` or `None`; invalid arguments exit with status 2.
`build_parser` returns the underlying `argparse` parser.

`docfingerprint.cli.exit.Outcome` maps a run's outcome to an exit code:
`ALL_MATCHED` 0, `PARTIAL` 1, `REFUSAL` 2.

```python
from docfingerprint.cli.args import parse_args
from docfingerprint.cli.exit import Outcome

cli = parse_args(["--fp", "csv.v0", "--jobs", "4", "--diagnose"])
print(cli.fingerprints, cli.jobs, cli.diagnose)

print(Outcome.PARTIAL.exit_code())
```

## What this package does not do

- It installs no command. The argument model parses a command line, but
  nothing here acts on it: there is no manifest processing, fingerprint
  evaluation, witness ledger, DSL compilation or inference.
- It does not read spreadsheet contents; `XlsxDocument` only carries the
  workbook's path.
- It does not validate `.fp.yaml` files against the schema; it only
  builds the schema.