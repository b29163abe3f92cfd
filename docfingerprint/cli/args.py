"""Command-line arguments for the fingerprint tool."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

_PROG = "fingerprint"
_VERSION = "0.2.0"
_SUBCOMMANDS = frozenset({"compile", "witness", "infer", "infer-schema"})
_VALUE_OPTIONS = frozenset({"--fp", "--jobs"})


class WitnessAction(Enum):
    """Operations on the witness ledger."""

    QUERY = "query"
    LAST = "last"
    COUNT = "count"


@dataclass
class CompileCommand:
    """Compile a DSL fingerprint definition, or print its schema."""

    yaml: Path | None = None
    out: Path | None = None
    check: bool = False
    schema: bool = False


@dataclass
class WitnessCommand:
    """Query the witness ledger."""

    action: WitnessAction


@dataclass
class InferCommand:
    """Infer a fingerprint definition from a directory of example documents."""

    dir: Path
    format: str
    id: str
    min_confidence: float = 0.9
    no_extract: bool = False
    out: Path | None = None


@dataclass
class InferSchemaCommand:
    """Infer a fingerprint from one document and its field values."""

    doc: Path
    fields: Path
    id: str | None = None
    out: Path | None = None


Command = Union[CompileCommand, WitnessCommand, InferCommand, InferSchemaCommand]


@dataclass
class Cli:
    """The parsed command line."""

    command: Command | None = None
    input: Path | None = None
    fingerprints: list[str] = field(default_factory=list)
    list: bool = False
    jobs: int | None = None
    no_witness: bool = False
    progress: bool = False
    diagnose: bool = False
    describe: bool = False
    schema: bool = False


def _job_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid job count '{value}'") from None
    if count < 0:
        raise argparse.ArgumentTypeError(f"invalid job count '{value}'")
    return count


def _new_parser(**kwargs) -> argparse.ArgumentParser:
    return argparse.ArgumentParser(prog=_PROG, allow_abbrev=False, **kwargs)


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-V", "--version", action="version", version=f"{_PROG} {_VERSION}"
    )
    parser.add_argument(
        "--fp",
        dest="fingerprints",
        action="append",
        metavar="ID",
        help="fingerprint ID to test (repeatable; evaluated in order, first match wins)",
    )
    parser.add_argument(
        "--list", action="store_true", help="list available fingerprints and exit"
    )
    parser.add_argument(
        "--jobs", type=_job_count, help="number of parallel workers (default: CPU count)"
    )
    parser.add_argument(
        "--no-witness", action="store_true", help="suppress witness ledger recording"
    )
    parser.add_argument("--progress", action="store_true", help="emit progress to stderr")
    parser.add_argument(
        "--diagnose",
        action="store_true",
        help="include assertion failure context and evaluate all assertions",
    )
    parser.add_argument(
        "--describe", action="store_true", help="print operator.json and exit"
    )
    parser.add_argument("--schema", action="store_true", help="print JSON Schema and exit")


def _build_run_parser() -> argparse.ArgumentParser:
    parser = _new_parser()
    parser.add_argument(
        "input",
        nargs="?",
        type=Path,
        metavar="INPUT",
        help="JSONL manifest file (default: stdin)",
    )
    _add_run_options(parser)
    return parser


def build_parser() -> argparse.ArgumentParser:
    """The parser for the top-level options and every subcommand."""
    parser = _new_parser(
        epilog="Without a command, reads a JSONL manifest from INPUT or stdin."
    )
    _add_run_options(parser)
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    compile_parser = subparsers.add_parser(
        "compile", help="compile a DSL fingerprint", allow_abbrev=False
    )
    compile_parser.add_argument(
        "yaml", nargs="?", type=Path, metavar="YAML", help="DSL fingerprint file (.fp.yaml)"
    )
    compile_parser.add_argument(
        "--out", dest="compile_out", type=Path, help="output directory for generated code"
    )
    compile_parser.add_argument(
        "--check",
        dest="compile_check",
        action="store_true",
        help="validate only, don't generate code",
    )
    compile_parser.add_argument(
        "--schema",
        dest="compile_schema",
        action="store_true",
        help="print JSON Schema for .fp.yaml and exit",
    )

    witness_parser = subparsers.add_parser(
        "witness", help="query the witness ledger", allow_abbrev=False
    )
    actions = witness_parser.add_subparsers(dest="action", metavar="ACTION", required=True)
    actions.add_parser(WitnessAction.QUERY.value, help="query witness records")
    actions.add_parser(WitnessAction.LAST.value, help="show last witness record")
    actions.add_parser(WitnessAction.COUNT.value, help="count witness records")

    infer_parser = subparsers.add_parser(
        "infer",
        help="infer fingerprint definition from example documents",
        allow_abbrev=False,
    )
    infer_parser.add_argument("dir", type=Path, help="directory of example documents")
    infer_parser.add_argument("--format", required=True, metavar="FMT", help="expected format")
    infer_parser.add_argument(
        "--id", dest="infer_id", required=True, metavar="ID", help="fingerprint ID"
    )
    infer_parser.add_argument(
        "--min-confidence",
        dest="min_confidence",
        type=float,
        default=0.9,
        help="minimum confidence threshold for inferred assertions",
    )
    infer_parser.add_argument(
        "--no-extract",
        action="store_true",
        help="disable extract/content_hash suggestions",
    )
    infer_parser.add_argument(
        "--out", dest="infer_out", type=Path, help="output .fp.yaml path (default: stdout)"
    )

    schema_parser = subparsers.add_parser(
        "infer-schema",
        help="infer fingerprint from a document and field values",
        allow_abbrev=False,
    )
    schema_parser.add_argument("--doc", required=True, type=Path, help="example document")
    schema_parser.add_argument(
        "--fields", required=True, type=Path, help="field definitions YAML"
    )
    schema_parser.add_argument("--id", dest="schema_id", help="fingerprint ID")
    schema_parser.add_argument(
        "--out", dest="schema_out", type=Path, help="output .fp.yaml path (default: stdout)"
    )
    return parser


def _has_subcommand(argv: list[str]) -> bool:
    """Whether the first positional token names a subcommand."""
    tokens = iter(argv)
    for token in tokens:
        if token == "--":
            return False
        if token in _VALUE_OPTIONS:
            next(tokens, None)
            continue
        if token.startswith("-") and token != "-":
            continue
        return token in _SUBCOMMANDS
    return False


def _compile_command(parser: argparse.ArgumentParser, ns: argparse.Namespace) -> CompileCommand:
    command = CompileCommand(
        yaml=ns.yaml, out=ns.compile_out, check=ns.compile_check, schema=ns.compile_schema
    )
    if command.schema:
        conflicts = [
            name
            for name, given in (
                ("YAML", command.yaml is not None),
                ("--out", command.out is not None),
                ("--check", command.check),
            )
            if given
        ]
        if conflicts:
            parser.error(
                f"compile: the argument '--schema' cannot be used with {', '.join(conflicts)}"
            )
    elif command.yaml is None:
        parser.error("compile: the following required arguments were not provided: YAML")
    return command


def _command(parser: argparse.ArgumentParser, ns: argparse.Namespace) -> Command:
    match ns.command:
        case "compile":
            return _compile_command(parser, ns)
        case "witness":
            return WitnessCommand(action=WitnessAction(ns.action))
        case "infer":
            return InferCommand(
                dir=ns.dir,
                format=ns.format,
                id=ns.infer_id,
                min_confidence=ns.min_confidence,
                no_extract=ns.no_extract,
                out=ns.infer_out,
            )
        case _:
            return InferSchemaCommand(
                doc=ns.doc, fields=ns.fields, id=ns.schema_id, out=ns.schema_out
            )


def parse_args(argv=None) -> Cli:
    """Parse the command line; invalid arguments exit with status 2."""
    args = list(sys.argv[1:] if argv is None else argv)
    if _has_subcommand(args):
        parser = build_parser()
        ns = parser.parse_args(args)
        command = _command(parser, ns)
        input_path = None
    else:
        ns = _build_run_parser().parse_args(args)
        command = None
        input_path = ns.input

    return Cli(
        command=command,
        input=input_path,
        fingerprints=list(ns.fingerprints or []),
        list=ns.list,
        jobs=ns.jobs,
        no_witness=ns.no_witness,
        progress=ns.progress,
        diagnose=ns.diagnose,
        describe=ns.describe,
        schema=ns.schema,
    )